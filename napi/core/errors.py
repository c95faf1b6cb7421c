"""
Exception hierarchy for napi

Every error a request can end in derives from NapiError and carries the
HTTP status it maps to plus a short client-visible message. The mapping to
responses lives in napi.webui.api.error_handlers.
"""

from typing import Optional


class NapiError(Exception):
    """Base exception for all napi request failures"""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


# ============================================
# 400 - bad request
# ============================================

class MissingParameter(NapiError):
    """A required request parameter is absent or empty"""

    status_code = 400

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        self.missing = missing or []
        super().__init__(message)


class InvalidParameter(NapiError):
    """A parameter is present but rejected (strict command mode)"""

    status_code = 400

    def __init__(self, message: str, parameter: Optional[str] = None):
        self.parameter = parameter
        super().__init__(message)


class InvalidPayload(NapiError):
    """Request body could not be decoded"""

    status_code = 400

    def __init__(self, message: str = "Invalid request payload"):
        super().__init__(message)


# ============================================
# 401 - authentication
# ============================================

class InvalidCredentials(NapiError):
    """Username/password pair does not match the configured one"""

    status_code = 401

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class Unauthorized(NapiError):
    """Request carries no authenticated session"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


# ============================================
# 403 / 429
# ============================================

class PathNotAllowed(NapiError):
    """Resolved file path escapes the configured file root"""

    status_code = 403

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class RateLimited(NapiError):
    """Client exhausted its bucket for a route class"""

    status_code = 429

    def __init__(
        self,
        limit_class: str,
        retry_after: Optional[int] = None,
        message: str = "Too Many Requests",
    ):
        self.limit_class = limit_class
        self.retry_after = retry_after
        super().__init__(message)


# ============================================
# 500 - execution / IO
# ============================================

class ExecutionError(NapiError):
    """External command could not be launched or exited non-zero"""

    status_code = 500

    def __init__(
        self,
        message: str = "command failed",
        command: Optional[str] = None,
        returncode: Optional[int] = None,
    ):
        self.command = command
        self.returncode = returncode
        super().__init__(message)


class FileAccessError(NapiError):
    """File could not be read or written"""

    status_code = 500

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ConfigError(Exception):
    """Startup configuration is missing or invalid"""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        self.message = message
        self.missing = missing or []
        super().__init__(f"Config Error: {message}")
