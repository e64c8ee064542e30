"""Launch installed applications through macOS LaunchServices."""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)


class AppLaunchError(RuntimeError):
    """The application could not be opened."""


def open_app(app_name: str, *, timeout: float = 30) -> None:
    """Run ``open -a <app_name>``; raise :class:`AppLaunchError` when it fails."""

    if not app_name.strip():
        raise AppLaunchError("Application name must not be empty.")
    argv = ["open", "-a", app_name]
    try:
        result = subprocess.run(  # noqa: S603
            argv,
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as error:
        logger.warning("Failed to run open for %s: %s", app_name, error)
        raise AppLaunchError(f"Could not open {app_name}.") from error
    if result.returncode != 0:
        logger.warning(
            "open exited with code %s for %s: %s",
            result.returncode,
            app_name,
            result.stderr.strip(),
        )
        raise AppLaunchError(f"Could not open {app_name}.")
