"""Conversation session management."""

from contextmem.core.session.session_manager import (
    DEFAULT_SESSION_ID,
    DEFAULT_TOPIC,
    SessionManager,
)

__all__ = ["SessionManager", "DEFAULT_SESSION_ID", "DEFAULT_TOPIC"]
