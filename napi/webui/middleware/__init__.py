"""
WebUI Middleware

Security headers on every response and per-route-class rate limiting.
"""

from napi.webui.middleware.rate_limit import RateLimiter, build_rate_limiters, rate_limit
from napi.webui.middleware.security import add_security_headers

__all__ = [
    "RateLimiter",
    "build_rate_limiters",
    "rate_limit",
    "add_security_headers",
]
