"""
API Error Handlers - maps exceptions to plain-text HTTP responses

Clients only ever see a short message and the status code:

    HTTP/1.1 400 Bad Request
    Content-Type: text/plain; charset=utf-8

    Service name is required

Details (stderr, paths, tracebacks) stay in the server log.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from napi.core.errors import InvalidPayload, NapiError, RateLimited

logger = logging.getLogger(__name__)


def error_response(message: str, status_code: int) -> PlainTextResponse:
    return PlainTextResponse(message + "\n", status_code=status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Register global error handlers

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(NapiError)
    async def napi_error_handler(request: Request, exc: NapiError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"{type(exc).__name__} on {request.method} {request.url.path}: "
            f"status={exc.status_code}, message={exc.message}"
        )

        response = error_response(exc.message, exc.status_code)
        if isinstance(exc, RateLimited) and exc.retry_after is not None:
            response.headers["Retry-After"] = str(exc.retry_after)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            f"Invalid payload on {request.method} {request.url.path}: {exc.errors()}"
        )
        error = InvalidPayload()
        return error_response(error.message, error.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            f"HTTP exception on {request.method} {request.url.path}: "
            f"status={exc.status_code}, detail={exc.detail}"
        )
        response = error_response(str(exc.detail), exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        return error_response("Internal Server Error", 500)
