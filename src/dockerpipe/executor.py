"""Command execution with live output streaming."""
import subprocess
import threading
from typing import List, Optional

from rich.console import Console

from .errors import ExecutionFailed
from .models import CommandResult

ERROR_KEYWORD = "error"


def is_error_line(line: str) -> bool:
    """Heuristic used to classify stderr lines as errors."""
    return ERROR_KEYWORD in line.lower()


class StreamCapture:
    """Lines drained from one stream. Owned by exactly one reader thread."""

    def __init__(self, name: str):
        self.name = name
        self.output: List[str] = []
        self.errors: List[str] = []
        self.failure: Optional[BaseException] = None


class CommandExecutor:
    """Runs shell commands, streaming stdout and stderr as they arrive."""

    def __init__(self, logger, console: Console = None, shell: str = "sh"):
        self.logger = logger
        self.console = console or Console()
        self.shell = shell

    def execute(self, command: str, description: str) -> CommandResult:
        """Run `command` through the shell and block until it finishes.

        Args:
            command: fully composed shell command line
            description: human readable label used in the log

        Returns:
            CommandResult with the accumulated output and error text

        Raises:
            ExecutionFailed: the command exited non-zero or could not start
        """
        self.logger.info(f"{description}...")
        self.logger.info(f"Executing: {command}")

        try:
            process = subprocess.Popen(
                [self.shell, "-c", command],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ExecutionFailed(f"failed to start command: {e}", context=command) from e

        stdout_capture = StreamCapture("stdout")
        stderr_capture = StreamCapture("stderr")
        readers = [
            threading.Thread(target=self._drain, args=(process.stdout, stdout_capture, False),
                             name="dockerpipe-stdout", daemon=True),
            threading.Thread(target=self._drain, args=(process.stderr, stderr_capture, True),
                             name="dockerpipe-stderr", daemon=True),
        ]
        for reader in readers:
            reader.start()

        exit_code = process.wait()
        for reader in readers:
            reader.join()

        for capture in (stdout_capture, stderr_capture):
            if capture.failure is not None:
                raise capture.failure

        result = CommandResult(
            stdout="".join(stdout_capture.output + stderr_capture.output),
            stderr="".join(stderr_capture.errors),
        )

        if exit_code != 0:
            raise ExecutionFailed(
                f"command failed with exit code {exit_code}",
                exit_code=exit_code,
                context=result.stderr.strip() or None,
            )

        return result

    def _drain(self, stream, capture: StreamCapture, classify_errors: bool):
        """Read one stream line by line until end of file.

        Keeps draining when echoing a line fails; the first failure is
        stored on the capture for the caller to raise.
        """
        with stream:
            for raw_line in stream:
                line = raw_line.rstrip("\r\n")
                is_error = classify_errors and is_error_line(line)
                if is_error:
                    capture.errors.append(line + "\n")
                else:
                    capture.output.append(line + "\n")
                try:
                    self.console.out(f"ERROR: {line}" if is_error else line, highlight=False)
                    self.logger.debug(f"[{capture.name}] {line}")
                except Exception as e:
                    if capture.failure is None:
                        capture.failure = e
