from __future__ import annotations

import subprocess

import allure
import pytest

from brew_queue.apps import AppLaunchError, open_app

pytestmark = [
    allure.epic("Inventory"),
    allure.feature("Application Launch"),
]


def test_open_app_runs_open_with_app_name(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda argv, **kwargs: calls.append(argv) or subprocess.CompletedProcess(argv, 0, "", ""),
    )

    open_app("Visual Studio Code")

    assert calls == [["open", "-a", "Visual Studio Code"]]


def test_open_app_failure_raises(monkeypatch, caplog) -> None:
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda argv, **kwargs: subprocess.CompletedProcess(argv, 1, "", "Unable to find app"),
    )

    with pytest.raises(AppLaunchError, match="Could not open Nope."):
        open_app("Nope")
    assert "Unable to find app" in caplog.text


def test_open_app_missing_command_raises(monkeypatch) -> None:
    def _missing(argv, **kwargs):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(subprocess, "run", _missing)

    with pytest.raises(AppLaunchError):
        open_app("Slack")


def test_open_app_rejects_blank_name() -> None:
    with pytest.raises(AppLaunchError, match="must not be empty"):
        open_app("  ")
