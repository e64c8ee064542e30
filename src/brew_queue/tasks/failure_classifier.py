"""Deterministic classification of a finished Homebrew process."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from brew_queue.tasks.models import FailureKind


class ExitDisposition(str, Enum):
    """What the runner does next with a finished process."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ESCALATE = "escalate"


@dataclass(slots=True, frozen=True)
class ExitClassification:
    """Normalized process exit result."""

    disposition: ExitDisposition
    exit_code: int
    reason: str | None = None
    failure_kind: FailureKind | None = None


def classify_process_exit(*, exit_code: int, escalation_requested: bool) -> ExitClassification:
    """Classify an exit code, letting a sudo prompt supersede the failure."""

    if exit_code == 0:
        return ExitClassification(disposition=ExitDisposition.SUCCEEDED, exit_code=exit_code)
    if escalation_requested:
        return ExitClassification(disposition=ExitDisposition.ESCALATE, exit_code=exit_code)
    return ExitClassification(
        disposition=ExitDisposition.FAILED,
        exit_code=exit_code,
        reason=f"process exited with code {exit_code}",
        failure_kind=FailureKind.PROCESS_EXIT_FAILURE,
    )
