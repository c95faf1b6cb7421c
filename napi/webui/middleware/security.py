"""Security headers middleware.

Adds a fixed set of security headers to every response, including error
and preflight responses:

- Content-Security-Policy: default-src 'self'
- Strict-Transport-Security: two years, subdomains, preload
- X-Content-Type-Options: nosniff
- X-Frame-Options: DENY
- X-XSS-Protection: legacy browser XSS filter
"""

import logging
from typing import Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

DEFAULT_CSP_POLICY = "default-src 'self'"

SECURITY_HEADERS: Dict[str, str] = {
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    def __init__(self, app: FastAPI, csp_policy: Optional[str] = None):
        """Initialize security headers middleware.

        Args:
            app: FastAPI application
            csp_policy: Custom CSP policy (optional)
        """
        super().__init__(app)
        self.csp_policy = csp_policy or DEFAULT_CSP_POLICY

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["Content-Security-Policy"] = self.csp_policy
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value

        return response


def add_security_headers(app: FastAPI, csp_policy: Optional[str] = None) -> None:
    """Add security headers middleware to FastAPI app.

    Example:
        ```python
        from fastapi import FastAPI
        from napi.webui.middleware.security import add_security_headers

        app = FastAPI()
        add_security_headers(app)
        ```
    """
    app.add_middleware(SecurityHeadersMiddleware, csp_policy=csp_policy)
    logger.info("Security headers middleware enabled (CSP, HSTS, X-Frame-Options, etc.)")
