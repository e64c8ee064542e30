"""Runtime configuration for the cask task queue."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

BREW_PATH_CANDIDATES: tuple[Path, ...] = (
    Path("/opt/homebrew/bin/brew"),
    Path("/usr/local/bin/brew"),
)


@dataclass(slots=True)
class EscalationSettings:
    """Interactive terminal fallback settings."""

    grace_seconds: float = 5.0
    terminal_app: str = "Terminal"


@dataclass(slots=True)
class PostludeSettings:
    """Post-install cleanup settings."""

    clear_quarantine: bool = True
    applications_dir: Path = Path("/Applications")


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    brew_path: Path | None = None
    notifications_enabled: bool = True
    escalation: EscalationSettings = field(default_factory=EscalationSettings)
    postlude: PostludeSettings = field(default_factory=PostludeSettings)

    @classmethod
    def from_env(cls, brew_path: Path | None = None) -> Settings:
        """Load settings from environment, detecting Homebrew when not configured."""

        configured = os.getenv("BREW_QUEUE_BREW_PATH", "").strip()
        return cls(
            brew_path=brew_path or (Path(configured) if configured else find_brew()),
            notifications_enabled=_env_bool("BREW_QUEUE_NOTIFICATIONS", default=True),
            escalation=EscalationSettings(
                grace_seconds=_env_float("BREW_QUEUE_ESCALATION_GRACE_SECONDS", "5.0"),
                terminal_app=os.getenv("BREW_QUEUE_TERMINAL_APP", "Terminal"),
            ),
            postlude=PostludeSettings(
                clear_quarantine=_env_bool("BREW_QUEUE_CLEAR_QUARANTINE", default=True),
                applications_dir=Path(
                    os.getenv("BREW_QUEUE_APPLICATIONS_DIR", "/Applications"),
                ),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the runner cannot work with."""

        if self.escalation.grace_seconds < 0:
            raise ValueError("BREW_QUEUE_ESCALATION_GRACE_SECONDS must be >= 0.")
        if not self.escalation.terminal_app.strip():
            raise ValueError("BREW_QUEUE_TERMINAL_APP must not be empty.")


def find_brew(candidates: tuple[Path, ...] = BREW_PATH_CANDIDATES) -> Path | None:
    """Return the first Homebrew executable that exists on this machine."""

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as error:
        raise ValueError(f"Invalid numeric value for {name}: {raw!r}") from error


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
