"""Server-side session records for authenticated users.

A login creates a session entry keyed by a random id that is embedded in the
access token. Requests resolve the session through the store, and logout
clears it, so a token stops working as soon as its session is gone.
"""

import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Protocol

from billing_backend.app.core.time import utc_now


@dataclass(frozen=True)
class SessionData:
    user_id: int
    email: str
    authenticated_at: datetime = field(default_factory=utc_now)


class SessionStore(Protocol):
    def get(self, session_id: str) -> Optional[SessionData]: ...

    def set(self, session_id: str, data: SessionData) -> None: ...

    def clear(self, session_id: str) -> None: ...


class InMemorySessionStore:
    def __init__(self):
        self._sessions: dict[str, SessionData] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[SessionData]:
        with self._lock:
            return self._sessions.get(session_id)

    def set(self, session_id: str, data: SessionData) -> None:
        with self._lock:
            self._sessions[session_id] = data

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


_session_store = InMemorySessionStore()


def get_session_store() -> SessionStore:
    """FastAPI dependency returning the process-wide session store."""
    return _session_store
