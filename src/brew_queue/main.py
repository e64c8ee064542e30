"""CLI entrypoint for brew-queue."""

import logging
from collections.abc import Callable
from pathlib import Path

import rich_click as click

from brew_queue import __version__
from brew_queue.apps import AppLaunchError
from brew_queue.controllers import (
    CaskCommand,
    CommandResult,
    InventoryCommand,
    OpenAppCommand,
    TaskBatchCommand,
    TaskCliController,
)
from brew_queue.inventory import InventoryError
from brew_queue.tasks import TaskAction

click.rich_click.USE_MARKDOWN = True
TASK_CONTROLLER = TaskCliController()

_brew_path_option = click.option(
    "--brew-path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Homebrew executable. Auto-detected when omitted.",
)


@click.group()
@click.version_option(version=__version__, prog_name="brew-queue")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output to stderr.")
def brew_queue(verbose: bool) -> None:
    """Queue Homebrew cask operations and run them one at a time."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _task_command(action: TaskAction, help_text: str) -> None:
    @brew_queue.command(action.value, help=help_text)
    @click.argument("packages", nargs=-1, required=True)
    @click.option(
        "--name",
        "display_name",
        default=None,
        help=(
            "Display name used in notifications and, for installs, the /Applications bundle"
            " to clear quarantine on (e.g. \"Visual Studio Code\"). Defaults to the package"
            " id. Single package only."
        ),
    )
    @_brew_path_option
    @click.option(
        "--notify/--no-notify",
        default=None,
        help="Override BREW_QUEUE_NOTIFICATIONS for this run.",
    )
    def _command(
        packages: tuple[str, ...],
        display_name: str | None,
        brew_path: Path | None,
        notify: bool | None,
    ) -> None:
        try:
            result = TASK_CONTROLLER.run_batch(
                TaskBatchCommand(
                    action=action,
                    package_ids=packages,
                    display_name=display_name,
                    brew_path=brew_path,
                    notifications=notify,
                ),
                emit=click.echo,
            )
        except ValueError as error:
            raise click.ClickException(str(error)) from error
        if not result.success:
            raise click.ClickException("One or more tasks failed.")


_task_command(TaskAction.INSTALL, "Install casks, one after another.")
_task_command(TaskAction.UNINSTALL, "Uninstall casks (forced), one after another.")
_task_command(TaskAction.UPGRADE, "Upgrade casks, one after another.")


@brew_queue.command("check")
@_brew_path_option
def check(brew_path: Path | None) -> None:
    """Show which Homebrew executable will be used."""

    _finish(TASK_CONTROLLER.check(InventoryCommand(brew_path=brew_path)), "Homebrew unavailable.")


@brew_queue.command("installed")
@_brew_path_option
def installed(brew_path: Path | None) -> None:
    """List installed casks."""

    _finish(_inventory_call(TASK_CONTROLLER.installed, brew_path), "Listing failed.")


@brew_queue.command("outdated")
@_brew_path_option
def outdated(brew_path: Path | None) -> None:
    """List casks with newer versions available."""

    _finish(_inventory_call(TASK_CONTROLLER.outdated, brew_path), "Listing failed.")


@brew_queue.command("homepage")
@click.argument("cask")
@_brew_path_option
@click.option("--open", "open_browser", is_flag=True, default=False, help="Open it in the browser.")
def homepage(cask: str, brew_path: Path | None, open_browser: bool) -> None:
    """Print a cask's homepage from `brew info`."""

    try:
        result = TASK_CONTROLLER.homepage(CaskCommand(cask=cask, brew_path=brew_path))
    except (InventoryError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _finish(result, "Homepage unavailable.")
    if open_browser:
        click.launch(result.lines[0])


@brew_queue.command("open")
@click.argument("app_name")
def open_application(app_name: str) -> None:
    """Launch an installed application by its display name."""

    try:
        result = TASK_CONTROLLER.open_app(OpenAppCommand(app_name=app_name))
    except AppLaunchError as error:
        raise click.ClickException(str(error)) from error
    _finish(result, "Open failed.")


def _inventory_call(
    method: Callable[[InventoryCommand], CommandResult],
    brew_path: Path | None,
) -> CommandResult:
    try:
        return method(InventoryCommand(brew_path=brew_path))
    except (InventoryError, ValueError) as error:
        raise click.ClickException(str(error)) from error


def _finish(result: CommandResult, failure_message: str) -> None:
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException(failure_message)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    brew_queue()
