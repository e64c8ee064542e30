from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import allure
import pytest

from brew_queue.tasks.backend import ProcessRunRequest, ProcessSpawnError, ProcessSupervisor
from brew_queue.tasks.commands import build_env
from brew_queue.tasks.models import TaskAction, TaskOutcome, TaskState

pytestmark = [
    allure.epic("Task Runtime"),
    allure.feature("Process Supervision"),
    pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell wrapper"),
]


def test_supervisor_streams_stderr_lines_and_returns_exit_code(fake_brew) -> None:
    brew = fake_brew(stderr_lines=("==> Downloading", "#### 12.5%"), exit_code=3)
    lines: list[str] = []

    result = ProcessSupervisor().run(
        ProcessRunRequest(argv=[str(brew), "install", "--cask", "firefox"], on_stderr_line=lines.append),
    )

    assert result.exit_code == 3
    assert lines == ["==> Downloading", "#### 12.5%"]
    assert result.stderr_lines == 2


def test_supervisor_splits_carriage_return_progress_redraws(fake_brew) -> None:
    brew = fake_brew(stderr_lines=("#   5.0%\\r###  40.0%\\r######  80.0%",))
    lines: list[str] = []

    ProcessSupervisor().run(ProcessRunRequest(argv=[str(brew)], on_stderr_line=lines.append))

    assert lines == ["#   5.0%", "###  40.0%", "######  80.0%"]


def test_supervisor_passes_no_auto_update_flag(fake_brew) -> None:
    brew = fake_brew(report_env="HOMEBREW_NO_AUTO_UPDATE")
    lines: list[str] = []

    ProcessSupervisor().run(
        ProcessRunRequest(argv=[str(brew)], env=build_env(), on_stderr_line=lines.append),
    )

    assert lines == ["HOMEBREW_NO_AUTO_UPDATE=1"]


def test_supervisor_raises_spawn_error_for_missing_executable(tmp_path: Path) -> None:
    with pytest.raises(ProcessSpawnError, match="Command not found"):
        ProcessSupervisor().run(ProcessRunRequest(argv=[str(tmp_path / "missing-brew")]))


def test_supervisor_rejects_empty_command() -> None:
    with pytest.raises(ProcessSpawnError, match="empty"):
        ProcessSupervisor().run(ProcessRunRequest(argv=[]))


def test_supervisor_terminates_process_when_callback_fails(fake_brew) -> None:
    brew = fake_brew(stderr_lines=("first",))

    def _boom(line: str) -> None:
        raise RuntimeError(line)

    with pytest.raises(RuntimeError, match="first"):
        ProcessSupervisor().run(ProcessRunRequest(argv=[str(brew)], on_stderr_line=_boom))


def test_service_runs_real_process_through_escalation(
    fake_brew,
    make_service,
    settings,
    events,
    launcher,
) -> None:
    brew = fake_brew(stderr_lines=("##### 30.0%", "sudo: a password is required"), exit_code=1)
    service = make_service(settings=replace(settings, brew_path=brew), backend=ProcessSupervisor())
    ack = service.submit(TaskAction.INSTALL, "firefox", "Firefox")

    service.runner.run_until_idle()

    assert events.states_for(ack.task.task_id) == [
        "queued",
        "running",
        "escalation_pending",
        "succeeded",
    ]
    terminal = events.statuses[-1]
    assert terminal.state == TaskState.SUCCEEDED
    assert terminal.outcome == TaskOutcome.ASSUMED_SUCCESS
    assert [event.sample.percent for event in events.progress if event.sample] == [30, 50]
    assert launcher.commands == [f"{brew} install --cask firefox"]
