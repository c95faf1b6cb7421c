"""
Server-side session store and credential check

The browser only holds a signed cookie carrying a session identifier
(Starlette SessionMiddleware). The identity bound to that identifier lives
here, so rotating a session on login makes the previous identifier dead
even if an old cookie is replayed.

Invariant: a stored session always carries exactly one identity; an
identifier that is not in the store is unauthenticated.
"""

import hmac
import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from napi.core.errors import InvalidCredentials

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32
DEFAULT_MAX_SESSIONS = 1000


@dataclass(frozen=True)
class Session:
    """An authenticated session"""
    session_id: str
    user: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionStore:
    """
    In-memory, thread-safe session store

    Limitations:
    - Data lost on restart (clients must log in again)
    - No cross-process sharing
    - No server-side expiry; lifetime follows the browser-session cookie
    - At most max_sessions live at once; creating one more evicts the oldest
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        # insertion ordered: the first key is the oldest session
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, user: str, replaces: Optional[str] = None) -> Session:
        """Create a fresh session for user, discarding the one it replaces"""
        session = Session(session_id=secrets.token_urlsafe(SESSION_ID_BYTES), user=user)
        with self._lock:
            if replaces is not None:
                self._sessions.pop(replaces, None)
            self._sessions[session.session_id] = session
            while len(self._sessions) > self.max_sessions:
                evicted = next(iter(self._sessions))
                del self._sessions[evicted]
                logger.info(f"Evicted oldest session (store holds {self.max_sessions})")
        return session

    def get(self, session_id: Optional[str]) -> Optional[Session]:
        if not session_id:
            return None
        with self._lock:
            return self._sessions.get(session_id)

    def discard(self, session_id: Optional[str]) -> bool:
        """Drop a session. Returns True if it existed."""
        if not session_id:
            return False
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def credentials_match(username: str, password: str, expected_username: str, expected_password: str) -> bool:
    """Constant-time comparison against the single configured credential pair"""
    user_ok = hmac.compare_digest(username.encode("utf-8"), expected_username.encode("utf-8"))
    pass_ok = hmac.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return user_ok and pass_ok


def authenticate(
    store: SessionStore,
    username: str,
    password: str,
    expected_username: str,
    expected_password: str,
    current_session_id: Optional[str] = None,
) -> Session:
    """Validate credentials and issue a new session.

    Any session bound to current_session_id is discarded first, so at most
    one identity is ever live per cookie.

    Raises:
        InvalidCredentials: credential mismatch; no session is created
    """
    if not credentials_match(username, password, expected_username, expected_password):
        logger.warning(f"Failed login attempt for user '{username}'")
        raise InvalidCredentials()

    return store.create(expected_username, replaces=current_session_id)
