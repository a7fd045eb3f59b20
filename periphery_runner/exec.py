"""
Subprocess execution for the periphery runner.

Commands are always argument vectors; nothing goes through a shell.
"""
import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when a command cannot be run at all."""
    pass


class CommandNotFoundError(CommandError):
    """Raised when the executable does not exist."""
    pass


class CommandTimeoutError(CommandError):
    """Raised when a command exceeds its timeout."""
    pass


class CommandRunner:
    """Runs commands in a fixed working directory and captures their output."""

    def __init__(self, workdir: Path, timeout: Optional[float] = None):
        self.workdir = workdir
        self.timeout = timeout

    def run_command(
        self,
        command: List[str],
        cwd: Optional[Path] = None,
        merge_stderr: bool = False
    ) -> subprocess.CompletedProcess:
        """
        Run a command from list of arguments.

        The exit status is not checked; callers inspect returncode.

        Args:
            command: Command as list of arguments
            cwd: Working directory (defaults to workdir)
            merge_stderr: Send stderr into stdout for combined output

        Returns:
            CompletedProcess result

        Raises:
            CommandNotFoundError: If the executable is missing
            CommandTimeoutError: If the command exceeds the timeout
        """
        if cwd is None:
            cwd = self.workdir

        command = [str(arg) for arg in command]
        logger.debug(f"Running in {cwd}: {shlex.join(command)}")

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise CommandNotFoundError(f"Executable not found: {command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(
                f"Command timed out after {self.timeout}s: {shlex.join(command)}"
            ) from e

        logger.debug(f"Exit {result.returncode}: {command[0]}")
        return result
