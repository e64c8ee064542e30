"""Serialized cask task queue.

One worker admits queued install/uninstall/upgrade tasks into a single
execution slot, streams Homebrew's stderr through the progress and sudo
detectors, and falls back to an interactive Terminal window when Homebrew
needs a password it cannot ask for through a pipe.
"""

from brew_queue.tasks.models import (
    FailureKind,
    ProgressEvent,
    ProgressSample,
    StatusEvent,
    Task,
    TaskAction,
    TaskOutcome,
    TaskState,
)
from brew_queue.tasks.service import SubmitAck, TaskService

__all__ = [
    "FailureKind",
    "ProgressEvent",
    "ProgressSample",
    "StatusEvent",
    "SubmitAck",
    "Task",
    "TaskAction",
    "TaskOutcome",
    "TaskService",
    "TaskState",
]
