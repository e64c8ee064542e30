from __future__ import annotations

import allure

from brew_queue.tasks.failure_classifier import ExitDisposition, classify_process_exit
from brew_queue.tasks.models import FailureKind

pytestmark = [
    allure.epic("Task Runtime"),
    allure.feature("Failures"),
]


def test_zero_exit_succeeds_even_after_sudo_prompt() -> None:
    classified = classify_process_exit(exit_code=0, escalation_requested=True)

    assert classified.disposition == ExitDisposition.SUCCEEDED
    assert classified.failure_kind is None


def test_non_zero_exit_with_sudo_prompt_escalates() -> None:
    classified = classify_process_exit(exit_code=1, escalation_requested=True)

    assert classified.disposition == ExitDisposition.ESCALATE
    assert classified.reason is None


def test_non_zero_exit_without_sudo_prompt_fails_with_code() -> None:
    classified = classify_process_exit(exit_code=3, escalation_requested=False)

    assert classified.disposition == ExitDisposition.FAILED
    assert classified.reason == "process exited with code 3"
    assert classified.failure_kind == FailureKind.PROCESS_EXIT_FAILURE
