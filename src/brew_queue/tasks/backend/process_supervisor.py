"""Subprocess supervisor streaming Homebrew's standard error line by line."""

from __future__ import annotations

import logging
import subprocess

from brew_queue.tasks.backend.base import ProcessRunRequest, ProcessRunResult

logger = logging.getLogger(__name__)


class ProcessSpawnError(RuntimeError):
    """The external command could not be located or started."""


class ProcessSupervisor:
    """Spawn one process, feed its stderr lines to a callback, report the exit code."""

    def run(self, request: ProcessRunRequest) -> ProcessRunResult:
        if not request.argv:
            raise ProcessSpawnError("Process command is empty.")
        command_head = request.argv[0]
        try:
            process = subprocess.Popen(  # noqa: S603
                request.argv,
                env=request.env or None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as error:
            raise ProcessSpawnError(f"Command not found: {command_head}") from error
        except OSError as error:
            raise ProcessSpawnError(f"Failed to start {command_head}: {error}") from error

        logger.debug("Started pid %s: %s", process.pid, request.argv)
        stderr_lines = 0
        with process:
            try:
                # Universal newlines turn carriage-return progress redraws into lines.
                for raw_line in process.stderr or ():
                    line = raw_line.rstrip("\n")
                    if not line:
                        continue
                    stderr_lines += 1
                    logger.debug("stderr [%s]: %s", process.pid, line)
                    if request.on_stderr_line is not None:
                        request.on_stderr_line(line)
            except BaseException:
                _terminate_process(process)
                raise
            exit_code = process.wait()

        logger.debug("Process %s exited with code %s", process.pid, exit_code)
        return ProcessRunResult(exit_code=exit_code, stderr_lines=stderr_lines)


def _terminate_process(process: subprocess.Popen[str]) -> None:
    try:
        process.terminate()
    except OSError:
        return
    try:
        process.wait(timeout=2)
    except subprocess.TimeoutExpired:
        try:
            process.kill()
        except OSError:
            return
        process.wait(timeout=2)
