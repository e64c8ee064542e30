"""Desktop notifications for finished and escalated tasks."""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Protocol

from brew_queue.tasks.models import FailureKind, StatusEvent, Task, TaskOutcome, TaskState

logger = logging.getLogger(__name__)

TITLE_COMPLETE = "Task Complete"
TITLE_FAILED = "Task Failed"
TITLE_ACTION_REQUIRED = "Action Required"


class Notifier(Protocol):
    """Fire-and-forget sink for short user-facing messages."""

    def notify(self, title: str, body: str) -> None:
        """Show a title and body to the user."""


class NullNotifier:
    """Notifier used when desktop notifications are disabled."""

    def notify(self, title: str, body: str) -> None:
        logger.debug("Notification suppressed: %s: %s", title, body)


class DesktopNotifier:
    """Show notifications via ``osascript`` on macOS and ``notify-send`` elsewhere."""

    def __init__(self, *, app_name: str = "brew-queue", platform: str | None = None) -> None:
        self.app_name = app_name
        self.platform = platform or sys.platform

    def notify(self, title: str, body: str) -> None:
        argv = self._build_argv(title, body)
        try:
            subprocess.run(argv, check=False, timeout=5, capture_output=True)  # noqa: S603
        except (OSError, subprocess.TimeoutExpired) as error:
            logger.warning("Desktop notification failed (%s): %s", title, error)

    def _build_argv(self, title: str, body: str) -> list[str]:
        if self.platform == "darwin":
            script = (
                f"display notification {_applescript_string(body)} "
                f"with title {_applescript_string(title)}"
            )
            return ["osascript", "-e", script]
        return ["notify-send", "--app-name", self.app_name, title, body]


def terminal_message(task: Task, event: StatusEvent) -> tuple[str, str]:
    """Return the notification title and body for a terminal status event."""

    if event.state == TaskState.SUCCEEDED:
        if event.outcome == TaskOutcome.ASSUMED_SUCCESS:
            return (
                TITLE_COMPLETE,
                f"{task.display_name} was likely {task.action.past}; "
                "confirm in the Terminal window.",
            )
        return TITLE_COMPLETE, f"{task.display_name} was successfully {task.action.past}."
    if event.failure_kind == FailureKind.ESCALATION_SURFACE_FAILURE:
        return (
            TITLE_FAILED,
            f"Could not open Terminal to finish the task for {task.display_name}.",
        )
    return TITLE_FAILED, f"The {task.action.value} task for {task.display_name} failed."


def escalation_message(task: Task) -> tuple[str, str]:
    return (
        TITLE_ACTION_REQUIRED,
        f"Please enter your password for {task.display_name} in the new Terminal window.",
    )


class NotificationObserver:
    """Status observer raising exactly one notification per terminal event."""

    def __init__(self, notifier: Notifier) -> None:
        self.notifier = notifier
        self._tasks: dict[str, Task] = {}

    def track(self, task: Task) -> None:
        self._tasks[task.task_id] = task

    def forget(self, task: Task) -> None:
        self._tasks.pop(task.task_id, None)

    def __call__(self, event: StatusEvent) -> None:
        if not event.state.terminal:
            return
        task = self._tasks.pop(event.task_id, None)
        if task is None:
            logger.debug("No tracked task for terminal event %s", event.task_id)
            return
        title, body = terminal_message(task, event)
        self.notifier.notify(title, body)


def _applescript_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
