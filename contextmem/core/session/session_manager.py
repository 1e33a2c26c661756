"""
Conversation session tracking.
"""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from contextmem.models.memory import ConversationSession, utc_now
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_ID = "default"
DEFAULT_TOPIC = "General Conversation"


class SessionManager:
    """
    Holds the single current conversation session.

    A session continues while it was last touched less than ``window`` ago;
    after that the next ``get_or_create`` starts a new one. Old sessions are
    superseded, never deleted.
    """

    def __init__(
        self,
        window_minutes: int = 30,
        default_topic: str = DEFAULT_TOPIC,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.window = timedelta(minutes=window_minutes)
        self.default_topic = default_topic
        self._clock = clock
        self._current: ConversationSession | None = None
        self._lock = threading.Lock()

    @property
    def current(self) -> ConversationSession | None:
        with self._lock:
            return self._current

    def current_session_id(self) -> str:
        """Id of the current session, or ``"default"`` when there is none."""
        with self._lock:
            return self._current.id if self._current else DEFAULT_SESSION_ID

    def start_new_session(self, topic: str | None = None) -> str:
        """Start a fresh session and make it current."""
        with self._lock:
            return self._start(topic or self.default_topic)

    def get_or_create(self, topic: str | None = None) -> str:
        """
        Return the current session id, continuing it if still inside the window.

        Continuing refreshes ``last_active``.
        """
        with self._lock:
            now = self._clock()
            session = self._current
            if session is not None and now - session.last_active < self.window:
                session.touch(now)
                return session.id
            return self._start(topic or self.default_topic)

    def set_summary(self, summary: str, session_id: str | None = None) -> None:
        """
        Store a summary on the current session.

        With ``session_id`` the write is dropped unless that session is still current.
        """
        with self._lock:
            if self._current is None:
                return
            if session_id is not None and self._current.id != session_id:
                logger.debug(f"Dropping summary for superseded session {session_id}")
                return
            self._current.summary = summary

    def _start(self, topic: str) -> str:
        now = self._clock()
        session = ConversationSession(topic=topic, start_time=now, last_active=now)
        self._current = session
        logger.info(f"Started session {session.id}", extra={"topic": topic})
        return session.id
