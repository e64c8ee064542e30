from __future__ import annotations

from pathlib import Path

import allure

from brew_queue.tasks.commands import NO_AUTO_UPDATE_ENV, build_argv, build_env, render_command
from brew_queue.tasks.models import TaskAction

pytestmark = [
    allure.epic("Task Runtime"),
    allure.feature("Homebrew Invocation"),
]


def test_build_argv_maps_each_action_to_cask_verbs() -> None:
    brew = Path("/opt/homebrew/bin/brew")

    assert build_argv(brew_path=brew, action=TaskAction.INSTALL, package_id="firefox") == [
        "/opt/homebrew/bin/brew",
        "install",
        "--cask",
        "firefox",
    ]
    assert build_argv(brew_path=brew, action=TaskAction.UNINSTALL, package_id="slack") == [
        "/opt/homebrew/bin/brew",
        "uninstall",
        "--cask",
        "--force",
        "slack",
    ]
    assert build_argv(brew_path=brew, action=TaskAction.UPGRADE, package_id="zoom") == [
        "/opt/homebrew/bin/brew",
        "upgrade",
        "--cask",
        "zoom",
    ]


def test_build_env_always_disables_auto_update() -> None:
    env = build_env({"PATH": "/usr/bin", NO_AUTO_UPDATE_ENV: "0"})

    assert env == {"PATH": "/usr/bin", NO_AUTO_UPDATE_ENV: "1"}


def test_build_env_copies_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("BREW_QUEUE_MARKER", "present")

    env = build_env()

    assert env["BREW_QUEUE_MARKER"] == "present"
    assert env[NO_AUTO_UPDATE_ENV] == "1"


def test_render_command_quotes_arguments() -> None:
    assert render_command(["/usr/local/bin/brew", "install", "--cask", "my app"]) == (
        "/usr/local/bin/brew install --cask 'my app'"
    )
