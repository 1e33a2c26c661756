"""
Tests for conversation session tracking.
"""

import pytest

from contextmem.core.session.session_manager import DEFAULT_SESSION_ID, DEFAULT_TOPIC


@pytest.mark.unit
class TestSessionManager:
    """Test session continuation window."""

    def test_no_session_uses_default_id(self, session_manager):
        assert session_manager.current is None
        assert session_manager.current_session_id() == DEFAULT_SESSION_ID

    def test_get_or_create_starts_session(self, session_manager):
        session_id = session_manager.get_or_create()

        assert session_id != DEFAULT_SESSION_ID
        assert session_manager.current.topic == DEFAULT_TOPIC
        assert session_manager.current_session_id() == session_id

    def test_same_session_within_window(self, session_manager, clock):
        first = session_manager.get_or_create()
        clock.advance(minutes=29)

        assert session_manager.get_or_create() == first

    def test_new_session_after_window(self, session_manager, clock):
        first = session_manager.get_or_create()
        clock.advance(minutes=31)

        assert session_manager.get_or_create() != first

    def test_window_boundary_is_exclusive(self, session_manager, clock):
        first = session_manager.get_or_create()
        clock.advance(minutes=30)

        assert session_manager.get_or_create() != first

    def test_continuation_refreshes_last_active(self, session_manager, clock):
        """Touching the session slides the window forward."""
        first = session_manager.get_or_create()
        clock.advance(minutes=20)
        session_manager.get_or_create()
        clock.advance(minutes=20)

        assert session_manager.get_or_create() == first
        assert session_manager.current.last_active == clock.now

    def test_start_new_session_always_new(self, session_manager):
        first = session_manager.start_new_session("Rust")
        second = session_manager.start_new_session()

        assert first != second
        assert session_manager.current.topic == DEFAULT_TOPIC

    def test_topic_used_for_new_session(self, session_manager):
        session_manager.get_or_create("Travel")
        assert session_manager.current.topic == "Travel"

    def test_set_summary(self, session_manager):
        session_manager.set_summary("ignored without a session")
        session_manager.start_new_session()
        session_manager.set_summary("Talked about rust.")

        assert session_manager.current.summary == "Talked about rust."

    def test_set_summary_for_superseded_session_is_dropped(self, session_manager):
        old = session_manager.start_new_session()
        session_manager.start_new_session()

        session_manager.set_summary("Old summary.", session_id=old)

        assert session_manager.current.summary == ""
