"""Read-only queries against the local Homebrew cask inventory."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from brew_queue.tasks.commands import build_env

logger = logging.getLogger(__name__)


class InventoryError(RuntimeError):
    """Homebrew could not be queried."""


@dataclass(slots=True, frozen=True)
class OutdatedCask:
    """One cask with a newer version available."""

    name: str
    installed_versions: tuple[str, ...]
    current_version: str


class BrewInventory:
    """Reads the local cask inventory through a given ``brew`` executable."""

    def __init__(self, brew_path: Path) -> None:
        self.brew_path = brew_path

    def installed(self) -> list[str]:
        output = self._run("list", "--cask", "--full-name")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def outdated(self) -> list[OutdatedCask]:
        payload = _load_json(self._run("outdated", "--cask", "--json"), "outdated")
        return [_parse_outdated(entry) for entry in payload.get("casks", [])]

    def info(self, cask: str) -> dict[str, object]:
        """Return the ``brew info --json=v2`` record for one cask."""

        payload = _load_json(self._run("info", "--json=v2", "--cask", cask), "info")
        casks = payload.get("casks") or []
        if not casks:
            raise InventoryError(f"No cask info for {cask}")
        return casks[0]

    def homepage(self, cask: str) -> str | None:
        homepage = self.info(cask).get("homepage")
        return str(homepage) if homepage else None

    def _run(self, *args: str) -> str:
        argv = [str(self.brew_path), *args]
        try:
            result = subprocess.run(  # noqa: S603
                argv,
                check=False,
                capture_output=True,
                text=True,
                env=build_env(),
            )
        except OSError as error:
            raise InventoryError(f"Failed to run {argv[0]}: {error}") from error
        if result.returncode != 0:
            logger.debug("brew %s stderr: %s", " ".join(args), result.stderr)
            raise InventoryError(
                f"brew {' '.join(args)} exited with code {result.returncode}",
            )
        return result.stdout


def _parse_outdated(entry: dict[str, object]) -> OutdatedCask:
    installed = entry.get("installed_versions") or ()
    if isinstance(installed, str):
        installed = (installed,)
    return OutdatedCask(
        name=str(entry.get("name", "")),
        installed_versions=tuple(str(version) for version in installed),  # type: ignore[union-attr]
        current_version=str(entry.get("current_version", "")),
    )


def _load_json(output: str, command: str) -> dict:
    try:
        payload = json.loads(output or "{}")
    except json.JSONDecodeError as error:
        raise InventoryError(f"Unexpected brew {command} output: {error}") from error
    if not isinstance(payload, dict):
        raise InventoryError(f"Unexpected brew {command} output: not a JSON object")
    return payload
