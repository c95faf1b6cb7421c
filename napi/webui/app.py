"""
FastAPI Application - napi

Composition root: builds the app from an immutable Settings object.

Request path, outermost first:
1. SecurityHeadersMiddleware - headers on every response
2. CORSMiddleware            - two allowed origins, credentialed, preflight
3. SessionMiddleware         - signed browser-session cookie holding the session id
4. Route dependencies        - general rate limit, route class limit, then the session gate
5. Handler

Collaborators (executor, session store, rate limiters) live on app.state
and can be replaced for tests or alternate backends.
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from napi import __version__
from napi.config import Settings, load_settings
from napi.core.executor import CommandExecutor
from napi.core.sessions import SessionStore
from napi.webui.api import auth, system, version
from napi.webui.api.error_handlers import register_error_handlers
from napi.webui.middleware.rate_limit import RateLimiter, build_rate_limiters
from napi.webui.middleware.security import add_security_headers

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"

CORS_ALLOW_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"napi {settings.version} starting (API port {settings.port})")
    logger.info(f"Allowed origins: {list(settings.cors_origins)}")
    if not settings.require_session_for_system:
        logger.warning("System routes are NOT session-gated (NAPI_REQUIRE_SESSION_FOR_SYSTEM=false)")
    if settings.file_root is not None:
        logger.info(f"File access confined to {settings.file_root}")
    if settings.strict_commands:
        logger.info("Strict command mode enabled for scheduled tasks")

    yield

    logger.info("napi shutting down...")


def create_app(
    settings: Settings,
    executor: Optional[CommandExecutor] = None,
    session_store: Optional[SessionStore] = None,
    rate_limiters: Optional[Dict[str, RateLimiter]] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Process configuration
        executor: Command runner (default: real subprocess executor)
        session_store: Session backend (default: in-memory)
        rate_limiters: Limiters by class name (default: from settings)
    """
    app = FastAPI(
        title="napi",
        description="Session-authenticated control plane for user services, files and at jobs",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.settings = settings
    app.state.executor = executor or CommandExecutor()
    if session_store is None:
        session_store = SessionStore(max_sessions=settings.max_sessions)
    app.state.session_store = session_store
    app.state.rate_limiters = rate_limiters or build_rate_limiters(settings)

    # Added innermost first: add_middleware wraps, so the last one added runs first
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_key,
        session_cookie=SESSION_COOKIE,
        max_age=None,  # browser-session cookie
        path="/",
        same_site="lax",
        https_only=settings.secure_cookies,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )
    add_security_headers(app)

    register_error_handlers(app)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(version.router, tags=["version"])
    app.include_router(system.router, tags=["system"])

    logger.info(
        f"Session middleware enabled (cookie={SESSION_COOKIE}, "
        f"secure={settings.secure_cookies}, max_age=browser-session)"
    )
    return app


def app_from_env() -> FastAPI:
    """uvicorn factory: settings from the environment / .env"""
    return create_app(load_settings())
