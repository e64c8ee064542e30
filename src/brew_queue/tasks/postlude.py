"""Best-effort cleanup after a successful cask operation."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path

from brew_queue.tasks.models import Task, TaskAction

logger = logging.getLogger(__name__)

Postlude = Callable[[Task], None]


def bundle_path(applications_dir: Path, display_name: str) -> Path:
    """Return the application bundle path an install is expected to produce."""

    name = display_name if display_name.endswith(".app") else f"{display_name}.app"
    return applications_dir / name


class QuarantineCleaner:
    """Strip the download quarantine marker so first launch does not warn."""

    def __init__(self, *, applications_dir: Path = Path("/Applications")) -> None:
        self.applications_dir = applications_dir

    def __call__(self, task: Task) -> None:
        if task.action != TaskAction.INSTALL:
            return
        target = bundle_path(self.applications_dir, task.display_name)
        if not target.exists():
            # Cask ids often differ from bundle names (``visual-studio-code``).
            logger.warning(
                "No application bundle at %s for %s; quarantine not cleared. "
                "Use the app's display name to target the bundle.",
                target,
                task.package_id,
            )
            return
        try:
            result = subprocess.run(  # noqa: S603
                ["xattr", "-cr", str(target)],
                check=False,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except (OSError, subprocess.TimeoutExpired) as error:
            logger.warning("Could not clear quarantine for %s: %s", target, error)
            return
        if result.returncode != 0:
            logger.warning(
                "xattr exited with code %s for %s: %s",
                result.returncode,
                target,
                result.stderr.strip(),
            )
