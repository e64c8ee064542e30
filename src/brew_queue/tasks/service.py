"""Use-case service for submitting cask operations."""

from __future__ import annotations

from dataclasses import dataclass

from brew_queue.config import Settings
from brew_queue.tasks.backend import ProcessBackend, ProcessSupervisor
from brew_queue.tasks.escalation import AppleScriptTerminal, EscalationHandler, TerminalLauncher
from brew_queue.tasks.models import Task, TaskAction, TaskState
from brew_queue.tasks.notifications import (
    DesktopNotifier,
    NotificationObserver,
    Notifier,
    NullNotifier,
)
from brew_queue.tasks.parsing import OutputInterpreter
from brew_queue.tasks.postlude import Postlude, QuarantineCleaner
from brew_queue.tasks.queue import AdmissionPolicy, TaskQueue, admit_all
from brew_queue.tasks.runner import TaskRunner
from brew_queue.tasks.status import StatusReporter


@dataclass(slots=True, frozen=True)
class SubmitAck:
    """Synchronous acknowledgment returned by :meth:`TaskService.submit`."""

    task: Task
    accepted: bool = True

    @property
    def state(self) -> TaskState | None:
        return TaskState.QUEUED if self.accepted else None


class TaskService:
    """Wires queue, runner, reporter and notifications behind one submit call."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        settings: Settings,
        backend: ProcessBackend | None = None,
        notifier: Notifier | None = None,
        launcher: TerminalLauncher | None = None,
        interpreter: OutputInterpreter | None = None,
        postlude: Postlude | None = None,
        admission: AdmissionPolicy = admit_all,
        reporter: StatusReporter | None = None,
        escalation: EscalationHandler | None = None,
    ) -> None:
        settings.validate()
        self.settings = settings
        self.reporter = reporter or StatusReporter()
        if notifier is None:
            notifier = DesktopNotifier() if settings.notifications_enabled else NullNotifier()
        self.notifier = notifier
        self.notifications = NotificationObserver(notifier)
        self.reporter.subscribe(on_status=self.notifications)

        if postlude is None and settings.postlude.clear_quarantine:
            postlude = QuarantineCleaner(applications_dir=settings.postlude.applications_dir)

        self.queue = TaskQueue(reporter=self.reporter, admission=admission)
        self.runner = TaskRunner(
            queue=self.queue,
            reporter=self.reporter,
            backend=backend or ProcessSupervisor(),
            escalation=escalation
            or EscalationHandler(
                reporter=self.reporter,
                notifier=notifier,
                launcher=launcher or AppleScriptTerminal(app_name=settings.escalation.terminal_app),
                grace_seconds=settings.escalation.grace_seconds,
            ),
            brew_path=settings.brew_path,
            interpreter=interpreter,
            postlude=postlude,
        )

    def submit(
        self,
        action: TaskAction | str,
        package_id: str,
        display_name: str | None = None,
    ) -> SubmitAck:
        """Queue one operation; execution happens on the runner."""

        if not package_id.strip():
            raise ValueError("Package id must not be empty.")
        task = Task(
            action=TaskAction(action),
            package_id=package_id,
            display_name=display_name or package_id,
        )
        self.notifications.track(task)
        if not self.queue.enqueue(task):
            self.notifications.forget(task)
            return SubmitAck(task=task, accepted=False)
        return SubmitAck(task=task)

    def start(self) -> None:
        self.runner.start()

    def stop(self, timeout: float | None = None) -> None:
        self.runner.stop(timeout=timeout)
