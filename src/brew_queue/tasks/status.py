"""Fan-out of task state transitions and progress samples to observers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from brew_queue.tasks.models import (
    FailureKind,
    ProgressEvent,
    ProgressSample,
    StatusEvent,
    Task,
    TaskOutcome,
    TaskState,
)

logger = logging.getLogger(__name__)

StatusCallback = Callable[[StatusEvent], None]
ProgressCallback = Callable[[ProgressEvent], None]

_ALLOWED_TRANSITIONS: dict[TaskState | None, frozenset[TaskState]] = {
    None: frozenset({TaskState.QUEUED}),
    TaskState.QUEUED: frozenset({TaskState.RUNNING}),
    TaskState.RUNNING: frozenset(
        {TaskState.ESCALATION_PENDING, TaskState.SUCCEEDED, TaskState.FAILED},
    ),
    TaskState.ESCALATION_PENDING: frozenset({TaskState.SUCCEEDED, TaskState.FAILED}),
    TaskState.SUCCEEDED: frozenset(),
    TaskState.FAILED: frozenset(),
}


@dataclass(slots=True, frozen=True, eq=False)
class Observer:
    """Registered pair of callbacks; either may be omitted."""

    on_status: StatusCallback | None = None
    on_progress: ProgressCallback | None = None


class Subscription:
    """Handle returned by :meth:`StatusReporter.subscribe`."""

    def __init__(self, reporter: StatusReporter, observer: Observer) -> None:
        self._reporter = reporter
        self._observer = observer

    def unsubscribe(self) -> None:
        self._reporter.unsubscribe(self._observer)


class StatusReporter:
    """Publish/subscribe registry that enforces one event per lifecycle step.

    Every task must go ``queued -> running -> [escalation_pending ->] terminal``.
    Events outside that graph are dropped with a warning, so observers can rely
    on exactly one terminal event per task to reset their busy indicators.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._observers: list[Observer] = []
        self._states: dict[str, TaskState] = {}

    def subscribe(
        self,
        on_status: StatusCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Subscription:
        observer = Observer(on_status=on_status, on_progress=on_progress)
        with self._lock:
            self._observers.append(observer)
        return Subscription(self, observer)

    def unsubscribe(self, observer: Observer) -> None:
        with self._lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                logger.debug("Observer already unsubscribed: %r", observer)

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    @property
    def tracked_count(self) -> int:
        """Number of tasks that have not yet reached a terminal state."""

        with self._lock:
            return len(self._states)

    def state_of(self, task_id: str) -> TaskState | None:
        """Return the last state published for an unfinished task, else None."""

        with self._lock:
            return self._states.get(task_id)

    def publish_state(self, event: StatusEvent) -> bool:
        """Broadcast a state transition; return False when it was rejected."""

        with self._lock:
            previous = self._states.get(event.task_id)
            if event.state not in _ALLOWED_TRANSITIONS[previous]:
                logger.warning(
                    "Dropping invalid transition for %s (%s): %s -> %s",
                    event.package_id,
                    event.task_id,
                    previous.value if previous else None,
                    event.state.value,
                )
                return False
            if event.state.terminal:
                # Finished tasks are forgotten; a late repeat then fails the ``None`` check.
                self._states.pop(event.task_id, None)
            else:
                self._states[event.task_id] = event.state
            observers = list(self._observers)

        logger.info(
            "Task %s %s -> %s%s",
            event.package_id,
            event.task_id,
            event.state.value,
            f" ({event.message})" if event.message else "",
        )
        for observer in observers:
            if observer.on_status is None:
                continue
            try:
                observer.on_status(event)
            except Exception:
                logger.exception("Status observer failed for %s", event.package_id)
        return True

    def report_state(
        self,
        task: Task,
        state: TaskState,
        *,
        message: str | None = None,
        outcome: TaskOutcome | None = None,
        failure_kind: FailureKind | None = None,
    ) -> bool:
        return self.publish_state(
            StatusEvent(
                task_id=task.task_id,
                package_id=task.package_id,
                state=state,
                message=message,
                outcome=outcome,
                failure_kind=failure_kind,
            ),
        )

    def report_progress(self, task: Task, sample: ProgressSample | None) -> None:
        """Broadcast a progress sample, or a clear when ``sample`` is None."""

        with self._lock:
            if self._states.get(task.task_id) not in (
                TaskState.RUNNING,
                TaskState.ESCALATION_PENDING,
            ):
                if sample is not None:
                    logger.debug("Ignoring progress for idle task %s", task.task_id)
                    return
            observers = list(self._observers)

        event = ProgressEvent(task_id=task.task_id, package_id=task.package_id, sample=sample)
        for observer in observers:
            if observer.on_progress is None:
                continue
            try:
                observer.on_progress(event)
            except Exception:
                logger.exception("Progress observer failed for %s", task.package_id)
