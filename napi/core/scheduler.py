"""
One-shot job scheduling through `at`

The command is fed to `at` on stdin via a shell pipeline:

    echo "<command>" | at <time>

Neither the time specification nor the command is validated unless strict
mode is on, so shell injection through either value is possible by default.
"""

import logging
import re

from napi.core.errors import InvalidParameter
from napi.core.executor import CommandExecutor

logger = logging.getLogger(__name__)

# Characters that let a value break out of the echo/at pipeline
SHELL_METACHARACTERS = re.compile(r"[;&|`$<>\"'\\\n\r(){}*?!#~]")


def build_at_command(time_spec: str, command: str) -> str:
    """Build the pipeline that hands command to at for time_spec"""
    return f'echo "{command}" | at {time_spec}'


def check_strict(time_spec: str, command: str) -> None:
    """Reject values carrying shell metacharacters.

    Raises:
        InvalidParameter: time or command contains a metacharacter
    """
    for name, value in (("time", time_spec), ("command", command)):
        if SHELL_METACHARACTERS.search(value):
            logger.warning(f"Rejected scheduled {name} with shell metacharacters: {value!r}")
            raise InvalidParameter(f"Parameter {name} contains disallowed characters", name)


def schedule_task(
    executor: CommandExecutor,
    time_spec: str,
    command: str,
    strict: bool = False,
) -> str:
    """Queue command for execution at time_spec.

    Returns:
        Output printed by at (usually empty, at reports on stderr)

    Raises:
        InvalidParameter: strict mode rejected the input
        ExecutionError: at failed
    """
    if strict:
        check_strict(time_spec, command)

    output = executor.run(build_at_command(time_spec, command))
    logger.info(f"Scheduled task at {time_spec}")
    return output
