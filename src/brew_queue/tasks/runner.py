"""Single-slot worker that drains the task queue one cask operation at a time."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

from brew_queue.tasks.backend import (
    ProcessBackend,
    ProcessRunRequest,
    ProcessSpawnError,
)
from brew_queue.tasks.commands import build_argv, build_env, render_command
from brew_queue.tasks.escalation import EscalationHandler
from brew_queue.tasks.failure_classifier import ExitDisposition, classify_process_exit
from brew_queue.tasks.models import (
    FailureKind,
    Task,
    TaskOutcome,
    TaskResolution,
    TaskState,
)
from brew_queue.tasks.parsing import OutputInterpreter
from brew_queue.tasks.postlude import Postlude
from brew_queue.tasks.queue import TaskQueue
from brew_queue.tasks.status import StatusReporter

logger = logging.getLogger(__name__)

BREW_NOT_FOUND = "Homebrew not found."


@dataclass(slots=True)
class RunSummary:
    """Aggregate runner counters for CLI reporting."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    escalated: int = 0
    assumed_success: int = 0
    idle_polls: int = 0
    busy_polls: int = 0

    def merge(self, other: RunSummary) -> None:
        self.processed += other.processed
        self.succeeded += other.succeeded
        self.failed += other.failed
        self.escalated += other.escalated
        self.assumed_success += other.assumed_success
        self.idle_polls += other.idle_polls
        self.busy_polls += other.busy_polls


class ExecutionResult(NamedTuple):
    resolution: TaskResolution
    escalated: bool


@dataclass(slots=True)
class _StreamState:
    escalation_requested: bool = False
    escalated: bool = False


class TaskRunner:
    """Admits queued tasks into a single execution slot and drives them to a terminal state."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        queue: TaskQueue,
        reporter: StatusReporter,
        backend: ProcessBackend,
        escalation: EscalationHandler,
        brew_path: Path | None,
        interpreter: OutputInterpreter | None = None,
        postlude: Postlude | None = None,
        poll_interval_seconds: float = 0.5,
    ) -> None:
        self.queue = queue
        self.reporter = reporter
        self.backend = backend
        self.escalation = escalation
        self.brew_path = brew_path
        self.interpreter = interpreter or OutputInterpreter()
        self.postlude = postlude
        self.poll_interval_seconds = poll_interval_seconds
        self._slot = threading.Lock()
        self._idle = queue.condition
        self._current: Task | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def current_task(self) -> Task | None:
        with self._idle:
            return self._current

    def is_idle(self) -> bool:
        with self._idle:
            return self._current is None and len(self.queue) == 0

    def run_once(self) -> RunSummary:
        """Process at most one task from the queue."""

        summary = RunSummary()
        if not self._slot.acquire(blocking=False):
            summary.busy_polls = 1
            return summary

        try:
            with self._idle:
                task = self.queue.try_dequeue()
                self._current = task
            if task is None:
                summary.idle_polls = 1
                return summary

            summary.processed = 1
            execution = self._execute(task)
            self._finish(task, execution.resolution)
            _record(summary, execution)
            return summary
        finally:
            with self._idle:
                self._current = None
                self._idle.notify_all()
            self._slot.release()

    def run_until_idle(self, *, max_tasks: int | None = None) -> RunSummary:
        """Drain the queue on the calling thread until it is empty."""

        aggregate = RunSummary()
        while max_tasks is None or aggregate.processed < max_tasks:
            summary = self.run_once()
            aggregate.merge(summary)
            if summary.processed == 0:
                return aggregate
        return aggregate

    def start(self) -> None:
        """Start the background worker thread that wakes on every enqueue."""

        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name="brew-queue-worker",
        )
        self._thread.start()
        logger.info("Task runner thread started")

    def stop(self, timeout: float | None = None) -> None:
        """Stop the worker after the in-flight task, if any, reaches a terminal state."""

        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Task runner thread stopped")

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until nothing is queued or running."""

        with self._idle:
            return self._idle.wait_for(
                lambda: self._current is None and len(self.queue) == 0,
                timeout=timeout,
            )

    def _worker_loop(self) -> None:
        while not self._stop.is_set():
            try:
                summary = self.run_once()
            except Exception:
                logger.exception("Task runner error")
                self._stop.wait(timeout=self.poll_interval_seconds)
                continue
            if summary.busy_polls:
                self._stop.wait(timeout=self.poll_interval_seconds)
            elif summary.processed == 0:
                self.queue.wait_for_task(timeout=self.poll_interval_seconds)

    def _execute(self, task: Task) -> ExecutionResult:
        self.reporter.report_state(task, TaskState.RUNNING, message=task.action.progressive)
        stream = _StreamState()
        try:
            resolution = self._run_process(task, stream)
        except Exception as error:
            logger.exception("Unexpected error while running %s", task.package_id)
            resolution = TaskResolution.failed(
                f"unexpected error: {error}",
                FailureKind.UNCLASSIFIED,
            )
        return ExecutionResult(resolution=resolution, escalated=stream.escalated)

    def _run_process(self, task: Task, stream: _StreamState) -> TaskResolution:
        if self.brew_path is None:
            return TaskResolution.failed(BREW_NOT_FOUND, FailureKind.PROCESS_SPAWN_FAILURE)

        argv = build_argv(brew_path=self.brew_path, action=task.action, package_id=task.package_id)

        def on_line(line: str) -> None:
            sample = self.interpreter.progress(line)
            if sample is not None:
                self.reporter.report_progress(task, sample)
            if self.interpreter.escalation(line):
                # The process may still succeed without privilege; decide on exit.
                stream.escalation_requested = True

        try:
            result = self.backend.run(
                ProcessRunRequest(argv=argv, env=build_env(), on_stderr_line=on_line),
            )
        except ProcessSpawnError as error:
            return TaskResolution.failed(str(error), FailureKind.PROCESS_SPAWN_FAILURE)

        classification = classify_process_exit(
            exit_code=result.exit_code,
            escalation_requested=stream.escalation_requested,
        )
        if classification.disposition == ExitDisposition.ESCALATE:
            stream.escalated = True
            self.reporter.report_state(
                task,
                TaskState.ESCALATION_PENDING,
                message=f"process exited with code {result.exit_code}; sudo required",
            )
            return self.escalation.resolve(task, render_command(argv))
        if classification.disposition == ExitDisposition.FAILED:
            return TaskResolution.failed(
                classification.reason or f"process exited with code {result.exit_code}",
                classification.failure_kind or FailureKind.PROCESS_EXIT_FAILURE,
            )

        self._run_postlude(task)
        return TaskResolution.verified()

    def _run_postlude(self, task: Task) -> None:
        if self.postlude is None:
            return
        try:
            self.postlude(task)
        except Exception:  # noqa: BLE001
            logger.warning("Postlude failed for %s", task.package_id, exc_info=True)

    def _finish(self, task: Task, resolution: TaskResolution) -> None:
        self.reporter.report_progress(task, None)
        self.reporter.report_state(
            task,
            resolution.state,
            message=resolution.message,
            outcome=resolution.outcome,
            failure_kind=resolution.failure_kind,
        )


def _record(summary: RunSummary, execution: ExecutionResult) -> None:
    resolution = execution.resolution
    if execution.escalated:
        summary.escalated = 1
    if resolution.state == TaskState.SUCCEEDED:
        summary.succeeded = 1
        if resolution.outcome == TaskOutcome.ASSUMED_SUCCESS:
            summary.assumed_success = 1
    else:
        summary.failed = 1
