"""Process backends for cask task execution."""

from brew_queue.tasks.backend.base import (
    LineCallback,
    ProcessBackend,
    ProcessRunRequest,
    ProcessRunResult,
)
from brew_queue.tasks.backend.process_supervisor import ProcessSpawnError, ProcessSupervisor

__all__ = [
    "LineCallback",
    "ProcessBackend",
    "ProcessRunRequest",
    "ProcessRunResult",
    "ProcessSpawnError",
    "ProcessSupervisor",
]
