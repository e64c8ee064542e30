"""Domain models for the cask task queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


class TaskAction(str, Enum):
    """Closed set of mutating operations the queue issues."""

    INSTALL = "install"
    UNINSTALL = "uninstall"
    UPGRADE = "upgrade"

    @property
    def progressive(self) -> str:
        return _ACTION_LABELS[self][0]

    @property
    def past(self) -> str:
        return _ACTION_LABELS[self][1]


_ACTION_LABELS: dict[TaskAction, tuple[str, str]] = {
    TaskAction.INSTALL: ("installing", "installed"),
    TaskAction.UNINSTALL: ("uninstalling", "uninstalled"),
    TaskAction.UPGRADE: ("upgrading", "upgraded"),
}


class TaskState(str, Enum):
    """Task lifecycle states."""

    QUEUED = "queued"
    RUNNING = "running"
    ESCALATION_PENDING = "escalation_pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def in_flight(self) -> bool:
        return self in (TaskState.RUNNING, TaskState.ESCALATION_PENDING)


TERMINAL_STATES = frozenset({TaskState.SUCCEEDED, TaskState.FAILED})


class TaskOutcome(str, Enum):
    """How a terminal state was reached."""

    VERIFIED = "verified"
    ASSUMED_SUCCESS = "assumed_success"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Normalized failure classes for failed tasks."""

    PROCESS_SPAWN_FAILURE = "process_spawn_failure"
    PROCESS_EXIT_FAILURE = "process_exit_failure"
    ESCALATION_SURFACE_FAILURE = "escalation_surface_failure"
    UNCLASSIFIED = "unclassified"


@dataclass(slots=True, frozen=True)
class Task:
    """One requested install/uninstall/upgrade against a named cask."""

    action: TaskAction
    package_id: str
    display_name: str
    task_id: str = field(default_factory=lambda: str(uuid4()))


@dataclass(slots=True, frozen=True)
class ProgressSample:
    """Ephemeral completion estimate parsed from diagnostic output."""

    percent: int
    text: str


@dataclass(slots=True, frozen=True)
class StatusEvent:
    """State transition broadcast to observers."""

    task_id: str
    package_id: str
    state: TaskState
    message: str | None = None
    outcome: TaskOutcome | None = None
    failure_kind: FailureKind | None = None


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    """Progress update; ``sample`` is None when progress is cleared."""

    task_id: str
    package_id: str
    sample: ProgressSample | None


@dataclass(slots=True, frozen=True)
class TaskResolution:
    """Terminal result of one task run."""

    state: TaskState
    outcome: TaskOutcome
    message: str | None = None
    failure_kind: FailureKind | None = None

    @classmethod
    def verified(cls, message: str | None = None) -> TaskResolution:
        return cls(state=TaskState.SUCCEEDED, outcome=TaskOutcome.VERIFIED, message=message)

    @classmethod
    def assumed(cls, message: str | None = None) -> TaskResolution:
        return cls(
            state=TaskState.SUCCEEDED,
            outcome=TaskOutcome.ASSUMED_SUCCESS,
            message=message,
        )

    @classmethod
    def failed(cls, message: str, failure_kind: FailureKind) -> TaskResolution:
        return cls(
            state=TaskState.FAILED,
            outcome=TaskOutcome.FAILED,
            message=message,
            failure_kind=failure_kind,
        )
