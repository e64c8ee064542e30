"""Controllers for brew-queue CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from brew_queue.config import Settings
from brew_queue.apps import open_app
from brew_queue.inventory import BrewInventory
from brew_queue.tasks import (
    ProgressEvent,
    StatusEvent,
    TaskAction,
    TaskOutcome,
    TaskService,
    TaskState,
)

LineSink = Callable[[str], None]


@dataclass(slots=True)
class TaskBatchCommand:
    """CLI input for one batch of cask operations."""

    action: TaskAction
    package_ids: tuple[str, ...]
    display_name: str | None = None
    brew_path: Path | None = None
    notifications: bool | None = None


@dataclass(slots=True)
class InventoryCommand:
    """CLI input for read-only inventory queries."""

    brew_path: Path | None = None


@dataclass(slots=True)
class CaskCommand:
    """CLI input for a query about one cask."""

    cask: str
    brew_path: Path | None = None


@dataclass(slots=True)
class OpenAppCommand:
    """CLI input for launching an installed application."""

    app_name: str


@dataclass(slots=True)
class CommandResult:
    """Printed lines plus overall success flag."""

    lines: list[str] = field(default_factory=list)
    success: bool = True


class TaskCliController:
    """Runs CLI use-cases against the task service and Homebrew inventory."""

    def __init__(self, service_factory: Callable[[Settings], TaskService] | None = None) -> None:
        self._service_factory = service_factory or (lambda settings: TaskService(settings=settings))

    def run_batch(self, command: TaskBatchCommand, emit: LineSink | None = None) -> CommandResult:
        """Queue every package, drain the queue, and stream events as lines."""

        if command.display_name is not None and len(command.package_ids) != 1:
            raise ValueError("--name can only be used with a single package.")

        settings = Settings.from_env(brew_path=command.brew_path)
        if command.notifications is not None:
            settings.notifications_enabled = command.notifications
        service = self._service_factory(settings)

        result = CommandResult()

        def _emit(line: str) -> None:
            result.lines.append(line)
            if emit is not None:
                emit(line)

        last_percent: dict[str, int] = {}

        def on_status(event: StatusEvent) -> None:
            if event.state == TaskState.FAILED:
                result.success = False
            _emit(_format_status(event))

        def on_progress(event: ProgressEvent) -> None:
            if event.sample is None:
                last_percent.pop(event.task_id, None)
                return
            if last_percent.get(event.task_id) == event.sample.percent:
                return
            last_percent[event.task_id] = event.sample.percent
            _emit(f"{event.package_id}: {event.sample.percent:3d}% {event.sample.text}")

        subscription = service.reporter.subscribe(on_status=on_status, on_progress=on_progress)
        try:
            for package_id in command.package_ids:
                service.submit(command.action, package_id, command.display_name)
            summary = service.runner.run_until_idle()
        finally:
            subscription.unsubscribe()

        _emit(
            "Summary: "
            f"processed={summary.processed} succeeded={summary.succeeded} "
            f"failed={summary.failed} escalated={summary.escalated} "
            f"assumed_success={summary.assumed_success}",
        )
        return result

    def check(self, command: InventoryCommand) -> CommandResult:
        settings = Settings.from_env(brew_path=command.brew_path)
        if settings.brew_path is None:
            return CommandResult(lines=["Homebrew not found."], success=False)
        if not settings.brew_path.exists():
            return CommandResult(
                lines=[f"Homebrew path does not exist: {settings.brew_path}"],
                success=False,
            )
        return CommandResult(lines=[f"Homebrew: {settings.brew_path}"])

    def installed(self, command: InventoryCommand) -> CommandResult:
        inventory = _inventory(command)
        casks = inventory.installed()
        if not casks:
            return CommandResult(lines=["No casks installed."])
        return CommandResult(lines=casks)

    def outdated(self, command: InventoryCommand) -> CommandResult:
        inventory = _inventory(command)
        casks = inventory.outdated()
        if not casks:
            return CommandResult(lines=["All casks are up to date."])
        return CommandResult(
            lines=[
                f"{cask.name} {', '.join(cask.installed_versions) or '?'} -> "
                f"{cask.current_version}"
                for cask in casks
            ],
        )

    def homepage(self, command: CaskCommand) -> CommandResult:
        inventory = _inventory(InventoryCommand(brew_path=command.brew_path))
        homepage = inventory.homepage(command.cask)
        if homepage is None:
            return CommandResult(lines=[f"No homepage found for {command.cask}."], success=False)
        return CommandResult(lines=[homepage])

    def open_app(self, command: OpenAppCommand) -> CommandResult:
        open_app(command.app_name)
        return CommandResult(lines=[f"Opened {command.app_name}."])


def _inventory(command: InventoryCommand) -> BrewInventory:
    settings = Settings.from_env(brew_path=command.brew_path)
    if settings.brew_path is None:
        raise ValueError("Homebrew not found. Set BREW_QUEUE_BREW_PATH or pass --brew-path.")
    return BrewInventory(settings.brew_path)


def _format_status(event: StatusEvent) -> str:
    line = f"{event.package_id}: {event.state.value}"
    if event.outcome == TaskOutcome.ASSUMED_SUCCESS:
        line += " (assumed)"
    if event.message:
        line += f" - {event.message}"
    return line
