"""
User service manager adapter

Wraps `systemctl --user` for listing units and for the start/stop/restart
lifecycle verbs. Listings go through the shell; lifecycle verbs are run as
an argv list so the target is passed as a single argument.
"""

import logging
from typing import List

from napi.core.executor import CommandExecutor
from napi.core.units import SERVICE_SUFFIX, SOCKET_SUFFIX, Unit, parse_units

logger = logging.getLogger(__name__)

SYSTEMCTL = ["systemctl", "--user"]

LIST_SERVICES_COMMAND = "systemctl --user list-units --type=service --all"
LIST_SOCKETS_COMMAND = "systemctl --user list-units --type=socket --all"

# verb -> past tense used in messages
LIFECYCLE_VERBS = {
    "start": "started",
    "stop": "stopped",
    "restart": "restarted",
}


class ServiceManager:
    """Thin facade over systemctl for the current user"""

    def __init__(self, executor: CommandExecutor):
        self.executor = executor

    def list_services(self) -> List[Unit]:
        """List all user service units.

        Raises:
            ExecutionError: systemctl failed
        """
        return parse_units(self.executor.run(LIST_SERVICES_COMMAND), SERVICE_SUFFIX)

    def list_sockets(self) -> List[Unit]:
        """List all user socket units.

        Raises:
            ExecutionError: systemctl failed
        """
        return parse_units(self.executor.run(LIST_SOCKETS_COMMAND), SOCKET_SUFFIX)

    def apply(self, verb: str, target: str) -> None:
        """Run a lifecycle verb against one unit.

        Raises:
            ValueError: verb is not start/stop/restart
            ExecutionError: systemctl failed
        """
        if verb not in LIFECYCLE_VERBS:
            raise ValueError(f"Unsupported lifecycle verb: {verb}")

        self.executor.run_args([*SYSTEMCTL, verb, target])
        logger.info(f"Service {target} {LIFECYCLE_VERBS[verb]}")
