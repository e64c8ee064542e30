"""Backend interface for supervised process execution."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

LineCallback = Callable[[str], None]


@dataclass(slots=True)
class ProcessRunRequest:
    """Inputs required to run one external command."""

    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)
    on_stderr_line: LineCallback | None = None


@dataclass(slots=True)
class ProcessRunResult:
    """Execution outcome from the supervisor."""

    exit_code: int
    stderr_lines: int = 0


class ProcessBackend(Protocol):
    """Protocol implemented by process supervisors."""

    def run(self, request: ProcessRunRequest) -> ProcessRunResult:
        """Run a command to completion and return its exit code."""
