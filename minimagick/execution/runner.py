"""Process execution for rendered command strings."""

import logging
import os
import signal
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Same status GNU timeout(1) reports for a killed command
TIMEOUT_EXIT_STATUS = 124


@dataclass
class ExecutionResult:
    """Outcome of running one command.

    Attributes:
        exit_status: Process exit status (TIMEOUT_EXIT_STATUS when killed)
        output: Standard output and standard error, interleaved
        timed_out: Whether the process was killed after the timeout
    """
    exit_status: int
    output: str
    timed_out: bool = False


class ProcessRunner(ABC):
    """Abstract base class for process runners.

    Runners take a fully rendered command string, block until it finishes
    or the timeout elapses, and report the exit status together with the
    combined output.
    """

    @abstractmethod
    def run(self, command: str, timeout: Optional[float] = None) -> ExecutionResult:
        """Run a command and capture its output.

        Args:
            command: Rendered command string
            timeout: Seconds to wait before killing the process (None waits
                forever)

        Returns:
            ExecutionResult for the finished or killed process
        """
        pass


class SubprocessRunner(ProcessRunner):
    """Runs commands through the system shell with ``subprocess``.

    The rendered command carries shell quoting around option values, so it
    is handed to the shell as-is. Standard error is redirected into standard
    output.
    """

    def run(self, command: str, timeout: Optional[float] = None) -> ExecutionResult:
        logger.debug(f"Running: {command} (timeout={timeout})")

        process = subprocess.Popen(
            command,
            shell=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=(os.name != "nt"),
        )
        try:
            stdout, _ = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Command timed out after {timeout}s: {command}")
            self._kill(process)
            stdout, _ = process.communicate()
            return ExecutionResult(
                exit_status=TIMEOUT_EXIT_STATUS,
                output=self._decode(stdout),
                timed_out=True,
            )
        except BaseException:
            self._kill(process)
            process.wait()
            raise

        return ExecutionResult(
            exit_status=process.returncode,
            output=self._decode(stdout),
        )

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        """Kill the shell and everything it started."""
        if os.name == "nt":
            process.kill()
            return
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            # Already exited
            pass

    @staticmethod
    def _decode(data: Optional[bytes]) -> str:
        if not data:
            return ""
        return data.decode("utf-8", errors="replace")
