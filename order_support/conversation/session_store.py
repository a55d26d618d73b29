"""
Keyed session storage with an explicit lifecycle.

The state machine only talks to the ``SessionStore`` interface, so a
bounded or persistent store can replace the in-memory one without
touching conversation logic. The in-memory store has no eviction policy:
sessions live until explicitly evicted or the process exits.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from order_support.schemas.session_schema import SessionData

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a session is requested for an unknown user id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(user_id)
        self.user_id = user_id

    def __str__(self) -> str:
        return f"User session not found: {self.user_id}"


class SessionStore(ABC):
    """Lifecycle interface for per-user sessions."""

    @abstractmethod
    def create(self, session: SessionData) -> SessionData:
        """Store a new session. Raises ValueError if the user already has one."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[SessionData]:
        """Return the user's session or None."""

    @abstractmethod
    def evict(self, user_id: str) -> bool:
        """Drop a session. Returns True if one was removed."""

    def get_or_raise(self, user_id: str) -> SessionData:
        session = self.get(user_id)
        if session is None:
            raise SessionNotFoundError(user_id)
        return session


class InMemorySessionStore(SessionStore):
    """Process-wide dict of sessions guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, SessionData] = {}

    def create(self, session: SessionData) -> SessionData:
        with self._lock:
            if session.user_id in self._sessions:
                raise ValueError(f"Session already exists for {session.user_id}")
            self._sessions[session.user_id] = session
        logger.debug("Session stored for %s", session.user_id)
        return session

    def get(self, user_id: str) -> Optional[SessionData]:
        with self._lock:
            return self._sessions.get(user_id)

    def evict(self, user_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(user_id, None) is not None
        if removed:
            logger.info("Session evicted for %s", user_id)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._sessions
