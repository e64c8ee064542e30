"""Shared test fixtures."""

from __future__ import annotations

import shlex
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from brew_queue.config import EscalationSettings, PostludeSettings, Settings
from brew_queue.tasks.escalation import EscalationHandler
from brew_queue.tasks.service import TaskService
from brew_queue.tasks.status import StatusReporter
from fakes import EventLog, FakeLauncher, RecordingNotifier, RecordingSleep, ScriptedBackend

_FAKE_BREW_MODULE = "brew_queue.tasks.backend.fake_brew"


@pytest.fixture()
def fake_brew(tmp_path: Path) -> Callable[..., Path]:
    """Build an executable ``brew`` wrapper around the bundled fake package manager."""

    def _build(
        *,
        stderr_lines: tuple[str, ...] = (),
        exit_code: int = 0,
        stdout: str | None = None,
        report_env: str | None = None,
        name: str = "brew",
    ) -> Path:
        args = [sys.executable, "-m", _FAKE_BREW_MODULE, "--exit-code", str(exit_code)]
        for line in stderr_lines:
            args += ["--stderr-line", line]
        if stdout is not None:
            args += ["--stdout", stdout]
        if report_env is not None:
            args += ["--report-env", report_env]
        script = tmp_path / name
        script.write_text(f'#!/bin/sh\nexec {shlex.join(args)} "$@"\n', encoding="utf-8")
        script.chmod(0o755)
        return script

    return _build


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        brew_path=tmp_path / "brew",
        notifications_enabled=False,
        escalation=EscalationSettings(grace_seconds=5.0),
        postlude=PostludeSettings(clear_quarantine=False, applications_dir=tmp_path),
    )


@pytest.fixture()
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def events() -> EventLog:
    return EventLog()


@pytest.fixture()
def make_service(
    settings: Settings,
    backend: ScriptedBackend,
    notifier: RecordingNotifier,
    launcher: FakeLauncher,
    sleep: RecordingSleep,
    events: EventLog,
) -> Callable[..., TaskService]:
    """Build a service wired to in-process fakes with the event log subscribed."""

    def _build(**overrides) -> TaskService:
        reporter = overrides.pop("reporter", None) or StatusReporter()
        reporter.subscribe(on_status=events.on_status, on_progress=events.on_progress)
        escalation = EscalationHandler(
            reporter=reporter,
            notifier=notifier,
            launcher=overrides.pop("launcher", launcher),
            grace_seconds=settings.escalation.grace_seconds,
            sleep=sleep,
        )
        return TaskService(
            settings=overrides.pop("settings", settings),
            backend=overrides.pop("backend", backend),
            notifier=notifier,
            reporter=reporter,
            escalation=escalation,
            **overrides,
        )

    return _build
