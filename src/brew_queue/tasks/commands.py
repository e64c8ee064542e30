"""Action to Homebrew command mapping."""

from __future__ import annotations

import os
import shlex
from pathlib import Path

from brew_queue.tasks.models import TaskAction

NO_AUTO_UPDATE_ENV = "HOMEBREW_NO_AUTO_UPDATE"

_ACTION_ARGS: dict[TaskAction, tuple[str, ...]] = {
    TaskAction.INSTALL: ("install", "--cask"),
    TaskAction.UNINSTALL: ("uninstall", "--cask", "--force"),
    TaskAction.UPGRADE: ("upgrade", "--cask"),
}


def build_argv(*, brew_path: Path | str, action: TaskAction, package_id: str) -> list[str]:
    """Return the argument vector for one cask operation."""

    return [str(brew_path), *_ACTION_ARGS[action], package_id]


def build_env(base: dict[str, str] | None = None) -> dict[str, str]:
    """Copy the environment and disable Homebrew auto-update for the run."""

    env = dict(os.environ if base is None else base)
    env[NO_AUTO_UPDATE_ENV] = "1"
    return env


def render_command(argv: list[str]) -> str:
    """Render argv as a single shell command line."""

    return shlex.join(argv)
