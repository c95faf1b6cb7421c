"""
Request dependencies

Everything a handler needs is hung off app.state by create_app() and pulled
in through these dependencies:

    @router.get("/version", dependencies=[Depends(require_session)])
    def version(settings: Settings = Depends(get_settings)):
        ...
"""

import logging
from typing import Optional

from fastapi import Depends, Request

from napi.config import Settings
from napi.core.errors import Unauthorized
from napi.core.executor import CommandExecutor
from napi.core.sessions import SessionStore
from napi.core.systemd import ServiceManager

logger = logging.getLogger(__name__)

# Key inside the signed cookie that holds the server-side session id
SESSION_ID_KEY = "sid"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_executor(request: Request) -> CommandExecutor:
    return request.app.state.executor


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_service_manager(executor: CommandExecutor = Depends(get_executor)) -> ServiceManager:
    return ServiceManager(executor)


def current_session_id(request: Request) -> Optional[str]:
    """Session id carried by the request cookie, if any"""
    return request.session.get(SESSION_ID_KEY)


def require_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> str:
    """Authorize the request.

    Returns:
        The authenticated identity

    Raises:
        Unauthorized: no cookie, or its session is not in the store
    """
    session = store.get(current_session_id(request))
    if session is None:
        client = request.client.host if request.client else "unknown"
        logger.info(f"Unauthorized {request.method} {request.url.path} from {client}")
        raise Unauthorized()
    return session.user


def require_system_session(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> Optional[str]:
    """Session gate for /system routes, governed by require_session_for_system"""
    if not settings.require_session_for_system:
        return None
    return require_session(request, store)
