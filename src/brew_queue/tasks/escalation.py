"""Re-run a privileged cask operation in an interactive Terminal window."""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Callable
from typing import Protocol

from brew_queue.tasks.models import FailureKind, ProgressSample, Task, TaskResolution
from brew_queue.tasks.notifications import Notifier, escalation_message
from brew_queue.tasks.status import StatusReporter

logger = logging.getLogger(__name__)

CHECK_TERMINAL_SAMPLE = ProgressSample(percent=50, text="Check terminal for password...")
TERMINAL_OPEN_FAILED = "failed to open escalation terminal"
ASSUMED_SUCCESS_MESSAGE = "assumed success; the Terminal window's result is not observable"


class TerminalLauncher(Protocol):
    """Opens a user-visible terminal running one command with elevated privilege."""

    def open(self, command: str) -> bool:
        """Return True when the terminal surface itself was opened."""


class AppleScriptTerminal:
    """Run ``sudo <command>; exit`` in a new window of a macOS terminal app."""

    def __init__(self, *, app_name: str = "Terminal") -> None:
        self.app_name = app_name

    def build_script(self, command: str) -> str:
        escaped = command.replace("\\", "\\\\").replace('"', '\\"')
        return (
            f'tell application "{self.app_name}"\n'
            "    activate\n"
            f'    do script "sudo {escaped}; exit"\n'
            "end tell"
        )

    def open(self, command: str) -> bool:
        try:
            result = subprocess.run(  # noqa: S603
                ["osascript", "-e", self.build_script(command)],
                check=False,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except (OSError, subprocess.TimeoutExpired) as error:
            logger.error("Could not run osascript for escalation: %s", error)
            return False
        if result.returncode != 0:
            logger.error(
                "osascript exited with code %s: %s",
                result.returncode,
                result.stderr.strip(),
            )
            return False
        return True


class EscalationHandler:
    """Hand a sudo-blocked command to a detached terminal and assume it succeeds.

    The detached terminal reports nothing back, so after ``grace_seconds`` the
    task resolves as ``assumed_success``, distinct from a verified success.
    """

    def __init__(
        self,
        *,
        reporter: StatusReporter,
        notifier: Notifier,
        launcher: TerminalLauncher,
        grace_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.reporter = reporter
        self.notifier = notifier
        self.launcher = launcher
        self.grace_seconds = grace_seconds
        self._sleep = sleep

    def resolve(self, task: Task, command: str) -> TaskResolution:
        logger.info("Command for %s requires admin privileges, opening terminal", task.package_id)
        self.reporter.report_progress(task, CHECK_TERMINAL_SAMPLE)

        if not self.launcher.open(command):
            return TaskResolution.failed(
                TERMINAL_OPEN_FAILED,
                FailureKind.ESCALATION_SURFACE_FAILURE,
            )

        title, body = escalation_message(task)
        self.notifier.notify(title, body)
        if self.grace_seconds > 0:
            self._sleep(self.grace_seconds)
        return TaskResolution.assumed(ASSUMED_SUCCESS_MESSAGE)
