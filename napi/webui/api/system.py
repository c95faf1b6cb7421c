"""
System API - user services, files and `at` jobs

Endpoints (all under /system, general then system rate class, session-gated unless
NAPI_REQUIRE_SESSION_FOR_SYSTEM=false):
- GET  /system/services          - List user service and socket units
- POST /system/services/start    - Start unit ?target=
- POST /system/services/stop     - Stop unit ?target=
- POST /system/services/restart  - Restart unit ?target=
- POST /system/write             - Write ?filename=&filepath=&filecontent=
- GET  /system/read              - Read ?filename=&filepath=
- POST /system/at                - Schedule ?time=&command=

Handlers are plain functions: each blocks its worker thread on exactly one
external call. Parameters are validated before anything is executed.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from napi.config import Settings
from napi.core import files, scheduler
from napi.core.errors import ExecutionError, MissingParameter
from napi.core.executor import CommandExecutor
from napi.core.systemd import LIFECYCLE_VERBS, ServiceManager
from napi.webui.dependencies import (
    get_executor,
    get_service_manager,
    get_settings,
    require_system_session,
)
from napi.webui.middleware.rate_limit import GENERAL, SYSTEM, rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/system",
    dependencies=[
        Depends(rate_limit(GENERAL)),
        Depends(rate_limit(SYSTEM)),
        Depends(require_system_session),
    ],
)

# verb -> gerund used in error messages
_VERB_ING = {
    "start": "starting",
    "stop": "stopping",
    "restart": "restarting",
}


def require_params(message: str, **params: Optional[str]) -> None:
    """Fail with MissingParameter unless every value is present and non-empty"""
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise MissingParameter(message, missing)


# ==================== Services ====================

@router.get("/services")
def list_services(manager: ServiceManager = Depends(get_service_manager)):
    """List services and sockets. Either listing failing fails the request."""
    try:
        services = manager.list_services()
    except ExecutionError as e:
        raise ExecutionError("Error fetching services", e.command, e.returncode) from e

    try:
        sockets = manager.list_sockets()
    except ExecutionError as e:
        raise ExecutionError("Error fetching sockets", e.command, e.returncode) from e

    return {
        "services": [unit.to_dict() for unit in services],
        "sockets": [unit.to_dict() for unit in sockets],
    }


def _lifecycle(manager: ServiceManager, verb: str, target: Optional[str]) -> dict:
    require_params("Service name is required", target=target)
    try:
        manager.apply(verb, target)
    except ExecutionError as e:
        raise ExecutionError(
            f"Error {_VERB_ING[verb]} service {target}", e.command, e.returncode
        ) from e
    return {"message": f"Service {target} {LIFECYCLE_VERBS[verb]} successfully"}


@router.post("/services/start")
def start_service(
    target: Optional[str] = None,
    manager: ServiceManager = Depends(get_service_manager),
):
    return _lifecycle(manager, "start", target)


@router.post("/services/stop")
def stop_service(
    target: Optional[str] = None,
    manager: ServiceManager = Depends(get_service_manager),
):
    return _lifecycle(manager, "stop", target)


@router.post("/services/restart")
def restart_service(
    target: Optional[str] = None,
    manager: ServiceManager = Depends(get_service_manager),
):
    return _lifecycle(manager, "restart", target)


# ==================== Files ====================

@router.post("/write")
def write_file(
    filename: Optional[str] = None,
    filepath: Optional[str] = None,
    filecontent: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    """Write filecontent to filepath/filename, overwriting"""
    require_params(
        "Filename, filepath, and filecontent are required",
        filename=filename,
        filepath=filepath,
        filecontent=filecontent,
    )
    files.write_file(filepath, filename, filecontent, root=settings.file_root)
    return {"message": f"File {filename} saved successfully at {filepath}"}


@router.get("/read")
def read_file(
    filename: Optional[str] = None,
    filepath: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    """Return the full text of filepath/filename"""
    require_params("Filename and filepath are required", filename=filename, filepath=filepath)
    return {"content": files.read_file(filepath, filename, root=settings.file_root)}


# ==================== Scheduling ====================

@router.post("/at")
def schedule_task(
    time: Optional[str] = None,
    command: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    executor: CommandExecutor = Depends(get_executor),
):
    """Queue command with at for the given time specification"""
    require_params("Both time and command are required", time=time, command=command)
    try:
        scheduler.schedule_task(executor, time, command, strict=settings.strict_commands)
    except ExecutionError as e:
        raise ExecutionError(f"Error scheduling task at {time}", e.command, e.returncode) from e
    return {"message": f"Task scheduled at {time}"}
