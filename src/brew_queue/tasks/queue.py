"""FIFO backlog of pending cask tasks."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Sequence

from brew_queue.tasks.models import Task, TaskState
from brew_queue.tasks.status import StatusReporter

AdmissionPolicy = Callable[[Task, Sequence[Task]], bool]


def admit_all(task: Task, pending: Sequence[Task]) -> bool:  # noqa: ARG001
    """Default admission: the same package may be queued any number of times."""

    return True


def admit_unique_package(task: Task, pending: Sequence[Task]) -> bool:
    """Reject a task whose package already waits in the queue."""

    return all(queued.package_id != task.package_id for queued in pending)


class TaskQueue:
    """Ordered backlog; insertion order is execution order."""

    def __init__(
        self,
        *,
        reporter: StatusReporter,
        admission: AdmissionPolicy = admit_all,
    ) -> None:
        self.reporter = reporter
        self.admission = admission
        self._pending: deque[Task] = deque()
        # Shared with the runner so dequeue and slot admission happen under one lock.
        # Reentrant: ``queued`` observers run under it and may query the runner or submit.
        self.condition = threading.Condition(threading.RLock())

    def enqueue(self, task: Task) -> bool:
        """Append a task and report it queued; return False if admission refused it."""

        with self.condition:
            if not self.admission(task, tuple(self._pending)):
                return False
            self._pending.append(task)
            # Reported under the lock so ``queued`` always precedes ``running``.
            self.reporter.report_state(task, TaskState.QUEUED)
            self.condition.notify_all()
        return True

    def try_dequeue(self) -> Task | None:
        with self.condition:
            if not self._pending:
                return None
            return self._pending.popleft()

    def wait_for_task(self, timeout: float | None = None) -> bool:
        """Block until the queue is non-empty or ``timeout`` elapses."""

        with self.condition:
            return self.condition.wait_for(lambda: bool(self._pending), timeout=timeout)

    def snapshot(self) -> tuple[Task, ...]:
        with self.condition:
            return tuple(self._pending)

    def __len__(self) -> int:
        with self.condition:
            return len(self._pending)
