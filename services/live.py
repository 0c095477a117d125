"""Live dashboard sessions: one observe-query subscription per signed-in user."""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from typing import Callable, Dict, Optional

from datastore.mock_appsync import MockDeviceStatusTable, Unsubscribe, build_default_table
from services.highlight import HighlightTracker

logger = logging.getLogger(__name__)

SESSION_IDLE_TIMEOUT_SECONDS = 30 * 60.0


@dataclass(frozen=True)
class DashboardUser:
    email: str
    preferred_username: str


@dataclass
class LiveSession:
    session_id: str
    user: DashboardUser
    tracker: HighlightTracker
    unsubscribe: Unsubscribe
    last_seen: float = 0.0

    def close(self) -> None:
        self.unsubscribe()
        self.tracker.close()


class LiveSessionRegistry:
    """Creates, looks up and tears down live sessions.

    Sessions not looked up for ``idle_timeout`` seconds are closed on the next
    ``open``/``get`` call.
    """

    def __init__(
        self,
        table: MockDeviceStatusTable,
        tracker_factory: Callable[[], HighlightTracker] = HighlightTracker,
        idle_timeout: float = SESSION_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.table = table
        self._tracker_factory = tracker_factory
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: Dict[str, LiveSession] = {}
        self._lock = Lock()

    def open(self, user: DashboardUser, replaces: Optional[str] = None) -> LiveSession:
        """Open a session; ``replaces`` names a prior session of the same browser to close."""
        self.close(replaces)
        self._evict_idle()
        session_id = secrets.token_urlsafe(24)
        tracker = self._tracker_factory()
        # The subscription delivers the current snapshot synchronously.
        unsubscribe = self.table.observe(tracker.apply)
        session = LiveSession(
            session_id=session_id,
            user=user,
            tracker=tracker,
            unsubscribe=unsubscribe,
            last_seen=self._clock(),
        )
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Live session opened", extra={"session_id": session_id})
        return session

    def get(self, session_id: Optional[str]) -> Optional[LiveSession]:
        self._evict_idle()
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_seen = self._clock()
            return session

    def close(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("Live session closed", extra={"session_id": session_id})
        return True

    def _evict_idle(self) -> None:
        deadline = self._clock() - self.idle_timeout
        with self._lock:
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if session.last_seen < deadline
            ]
        for session_id in expired:
            if self.close(session_id):
                logger.info("Idle live session evicted", extra={"session_id": session_id})

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache
def build_default_registry() -> LiveSessionRegistry:
    """Factory that wires the registry to the default device status table."""
    return LiveSessionRegistry(table=build_default_table())
