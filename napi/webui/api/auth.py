"""
Authentication API

Endpoints:
- POST /login  - Validate credentials and start a session (general, then login rate class)
- POST /logout - Drop the current session (general rate class)

A successful login always rotates the session: whatever session the
request's cookie pointed at is discarded before the new one is issued.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from napi.config import Settings
from napi.core.sessions import SessionStore, authenticate
from napi.webui.dependencies import (
    SESSION_ID_KEY,
    current_session_id,
    get_session_store,
    get_settings,
)
from napi.webui.middleware.rate_limit import GENERAL, LOGIN, rate_limit

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== Request/Response Models ====================

class LoginRequest(BaseModel):
    """Login payload. Absent fields count as empty and fail the credential check."""
    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    message: str
    sessionId: str


class MessageResponse(BaseModel):
    message: str


# ==================== Endpoints ====================

@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limit(GENERAL)), Depends(rate_limit(LOGIN))],
)
async def login(
    request: Request,
    creds: LoginRequest,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
):
    """Validate the configured credential pair and issue a fresh session"""
    session = authenticate(
        store,
        creds.username,
        creds.password,
        settings.username,
        settings.password,
        current_session_id=current_session_id(request),
    )

    request.session.clear()
    request.session[SESSION_ID_KEY] = session.session_id

    if settings.verbose_log:
        logger.info(
            f"User {session.user} logged in at {datetime.now(timezone.utc).isoformat()}"
        )

    return LoginResponse(message="Login successful", sessionId=session.session_id)


@router.post(
    "/logout",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(GENERAL))],
)
async def logout(
    request: Request,
    store: SessionStore = Depends(get_session_store),
):
    """Forget the current session. Safe to call without one."""
    if store.discard(current_session_id(request)):
        logger.info("Session cleared on logout")
    request.session.clear()
    return MessageResponse(message="Logout successful")
