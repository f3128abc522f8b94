"""
External process runner used for git commands.
"""

import logging
import shlex
from typing import Optional, Sequence, Union, List

from git import Git
from git.exc import CommandError

from ..error_handling import ErrorKind
from ..logging import audit
from ..models import ActionResult

logger = logging.getLogger(__name__)

Arguments = Union[str, Sequence[str]]


def split_arguments(arguments: Arguments) -> List[str]:
    """
    Turn an argument string into an argument list.

    Strings are split with POSIX shell-word rules (quotes group words) but no
    shell ever sees them. Sequences are taken as already split.
    """
    if arguments is None:
        return []
    if isinstance(arguments, str):
        return shlex.split(arguments)
    return [str(arg) for arg in arguments]


class ProcessRunner:
    """
    Runs an external executable and captures its output.

    Execution goes through GitPython's ``Git.execute`` with exceptions
    disabled, so a non-zero exit status comes back as a value. Failures to
    start the process are caught here and reported in the result; nothing
    raised by the child process escapes :meth:`run`.
    """

    def __init__(self, working_dir: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize the runner.

        Args:
            working_dir: Directory the process runs in (defaults to the current directory)
            timeout: Seconds after which the process is killed (None waits indefinitely)
        """
        self.working_dir = working_dir
        self.timeout = timeout
        self._git = Git(working_dir)

    def run(self, executable: str, arguments: Arguments = "") -> ActionResult:
        """
        Run ``executable`` with ``arguments`` and wait for it to exit.

        Args:
            executable: Name or path of the executable
            arguments: Argument string or argument list

        Returns:
            ActionResult with ``exit_code`` set when the process ran
        """
        try:
            argv = split_arguments(arguments)
        except ValueError as e:
            return ActionResult.failure(
                f"Cannot parse arguments {arguments!r}: {e}",
                ErrorKind.VALIDATION_ERROR
            )

        command = [executable, *argv]
        command_line = " ".join(shlex.quote(part) for part in command)

        audit(f"Executing command: {command_line}")
        logger.debug(f"Running {command_line} in {self.working_dir or 'current directory'}")

        try:
            status, stdout, stderr = self._git.execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
                kill_after_timeout=self.timeout,
                strip_newline_in_stdout=False
            )
        except (CommandError, OSError) as e:
            message = f"Failed to execute {executable}: {self._describe_start_failure(e)}"
            audit(f"Command failed to start: {command_line}: {message}")
            logger.error(f"Failed to execute {command_line}: {message}")
            return ActionResult.failure(message, ErrorKind.PROCESS_ERROR)

        stdout = stdout or ""
        stderr = stderr or ""

        audit(f"Command output: {stdout}")
        if stderr:
            audit(f"Command error: {stderr}")

        succeeded = status == 0
        error_message = stderr or None
        if succeeded:
            logger.info(f"{command_line} exited with status 0")
        else:
            logger.warning(f"{command_line} exited with status {status}")
            if error_message is None:
                error_message = f"{command_line} exited with status {status}"

        return ActionResult(
            succeeded=succeeded,
            output=stdout,
            error_message=error_message,
            exit_code=status,
            error_kind=None if succeeded else ErrorKind.PROCESS_ERROR
        )

    def _describe_start_failure(self, error: Exception) -> str:
        """Extract the OS-level reason a process could not be started."""
        cause = getattr(error, "__cause__", None) or getattr(error, "status", None)
        if isinstance(cause, OSError):
            return cause.strerror or str(cause)
        if isinstance(error, OSError):
            return error.strerror or str(error)
        return str(error).strip()
