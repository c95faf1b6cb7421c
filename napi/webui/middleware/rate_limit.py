"""
Rate Limiting

Per-route-class fixed-window limiting keyed by client address.

Each class ("general", "login", "system") owns an independent RateLimiter.
Every route consumes a general slot; /login and /system/* also consume a
slot of their own class.
A RateLimiter is the only thing handlers depend on ("check and consume a
slot for key K"); its storage is any `limits` storage URI, so the default
in-process memory:// backend can be swapped for redis:// or memcached://
through configuration.

Routes opt in with a dependency:

    router = APIRouter(dependencies=[
        Depends(rate_limit("general")),
        Depends(rate_limit("system")),
    ])

The dependency runs before authentication and before the handler.
"""

import logging
import time
from typing import Callable, Dict, Optional

from fastapi import Request
from limits import RateLimitItem, parse
from limits.storage import Storage, storage_from_string
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address

from napi.config import Settings
from napi.core.errors import RateLimited

logger = logging.getLogger(__name__)

GENERAL = "general"
LOGIN = "login"
SYSTEM = "system"


class RateLimiter:
    """One bucket class: a rate plus the storage its counters live in"""

    def __init__(self, name: str, rate: str, storage: Optional[Storage] = None):
        self.name = name
        self.item: RateLimitItem = parse(rate)
        self.storage = storage or storage_from_string("memory://")
        self._strategy = FixedWindowRateLimiter(self.storage)

    def hit(self, key: str) -> bool:
        """Consume a slot for key. Returns False when the bucket is empty."""
        return self._strategy.hit(self.item, self.name, key)

    def retry_after(self, key: str) -> int:
        """Seconds until the current window for key resets"""
        reset_at, _ = self._strategy.get_window_stats(self.item, self.name, key)
        return max(0, int(reset_at - time.time()) + 1)

    def reset(self) -> None:
        """Drop all counters (the storage is shared by every key of this class)"""
        self.storage.reset()

    def __repr__(self) -> str:
        return f"RateLimiter(name={self.name!r}, rate={self.item})"


def build_rate_limiters(settings: Settings) -> Dict[str, RateLimiter]:
    """Create the general, login and system limiters from settings.

    Every class gets its own storage instance so buckets never share
    counters.
    """
    limiters = {
        GENERAL: RateLimiter(GENERAL, settings.general_rate_limit,
                             storage_from_string(settings.rate_limit_storage)),
        LOGIN: RateLimiter(LOGIN, settings.login_rate_limit,
                           storage_from_string(settings.rate_limit_storage)),
        SYSTEM: RateLimiter(SYSTEM, settings.system_rate_limit,
                            storage_from_string(settings.rate_limit_storage)),
    }
    logger.info(
        "Rate limiters configured: "
        + ", ".join(f"{name}={limiter.item}" for name, limiter in limiters.items())
    )
    return limiters


def get_rate_limit_key(request: Request) -> str:
    """Client identity used as the bucket key"""
    return get_remote_address(request)


def rate_limit(limit_class: str) -> Callable[[Request], None]:
    """FastAPI dependency factory enforcing the named limiter.

    Raises:
        RateLimited: the client's bucket for limit_class is empty
    """
    def check(request: Request) -> None:
        limiter: RateLimiter = request.app.state.rate_limiters[limit_class]
        key = get_rate_limit_key(request)
        if not limiter.hit(key):
            logger.warning(
                f"Rate limit '{limit_class}' exceeded by {key} on "
                f"{request.method} {request.url.path}"
            )
            raise RateLimited(limit_class, retry_after=limiter.retry_after(key))

    return check
