"""
Process Executor

Runs external commands and returns their standard output as text.

Two entry points:
- run(command_line): through /bin/sh -c, so pipes and redirections work
- run_args(argv): no shell, each argv element is passed through untouched

There is no timeout and no output cap: a hung command hangs the calling
request. Callers are trusted to pass safe input.
"""

import logging
import subprocess
from typing import Sequence

from napi.core.errors import ExecutionError

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Synchronous command runner used by every system handler"""

    def __init__(self, shell: str = "/bin/sh"):
        self.shell = shell

    def run(self, command_line: str) -> str:
        """Execute a command line through the shell.

        Args:
            command_line: Full shell command line

        Returns:
            Captured standard output

        Raises:
            ExecutionError: launch failure or non-zero exit
        """
        return self._execute([self.shell, "-c", command_line], command_line)

    def run_args(self, argv: Sequence[str]) -> str:
        """Execute an argv list directly, without a shell.

        Raises:
            ExecutionError: launch failure or non-zero exit
        """
        return self._execute(list(argv), " ".join(argv))

    def _execute(self, argv: list[str], display: str) -> str:
        logger.debug(f"Executing: {display}")

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
            )
        except (OSError, ValueError) as e:
            # ValueError: argv carries an embedded NUL byte
            logger.error(f"Failed to launch {display!r}: {e}")
            raise ExecutionError(command=display) from e

        if result.returncode != 0:
            logger.error(
                f"Command '{display}' exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
            raise ExecutionError(command=display, returncode=result.returncode)

        return result.stdout
