"""Heuristic interpretation of Homebrew diagnostic output.

Homebrew reports download progress and sudo prompts as free-form text on
standard error. Both detectors below are plain functions over one line so they
can be swapped through :class:`OutputInterpreter` when upstream wording changes.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass

from brew_queue.tasks.models import ProgressSample

DOWNLOADING_TEXT = "Downloading..."

_PROGRESS_PATTERN = re.compile(r"#+ *(\d{1,3}(?:\.\d+)?)")
_ESCALATION_MARKERS: tuple[str, ...] = (
    "sudo: a password is required",
    "sudo: a terminal is required",
)

ProgressParser = Callable[[str], ProgressSample | None]
EscalationDetector = Callable[[str], bool]


def parse_progress(line: str) -> ProgressSample | None:
    """Return a download progress sample for a ``###### 42.5%`` style line."""

    match = _PROGRESS_PATTERN.search(line)
    if match is None:
        return None
    percent = math.floor(float(match.group(1)))
    return ProgressSample(percent=min(max(percent, 0), 100), text=DOWNLOADING_TEXT)


def requires_escalation(line: str) -> bool:
    """Return True when sudo asked for a password or a controlling terminal."""

    return any(marker in line for marker in _ESCALATION_MARKERS)


@dataclass(slots=True, frozen=True)
class OutputInterpreter:
    """Pair of line strategies applied to every stderr line of a running task."""

    progress: ProgressParser = parse_progress
    escalation: EscalationDetector = requires_escalation
