"""
Tests for the SQLite conversation log.
"""

from datetime import datetime, timedelta, timezone

import pytest

from contextmem.core.log_store import ConversationLog


@pytest.fixture
async def conversation_log(tmp_path):
    log = ConversationLog(db_path=str(tmp_path / "log" / "test.db"))
    await log.initialize()
    yield log
    await log.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestConversationLog:
    """Test the relational log."""

    async def test_initialize_creates_parent_directory(self, tmp_path, conversation_log):
        assert (tmp_path / "log" / "test.db").exists()

    async def test_initialize_is_idempotent(self, conversation_log):
        await conversation_log.initialize()

    async def test_append_and_recent(self, conversation_log):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        await conversation_log.append("user", "first", tag="s1", timestamp=base)
        await conversation_log.append("assistant", "second", tag="s1", timestamp=base + timedelta(seconds=1))

        entries = await conversation_log.recent(limit=10)

        assert [e.content for e in entries] == ["second", "first"]
        assert entries[0].actor == "assistant"
        assert entries[0].tag == "s1"
        assert entries[0].timestamp == base + timedelta(seconds=1)

    async def test_recent_limit(self, conversation_log):
        for i in range(5):
            await conversation_log.append("user", f"m{i}")
        assert len(await conversation_log.recent(limit=2)) == 2

    async def test_search(self, conversation_log):
        await conversation_log.append("user", "rust ownership rules")
        await conversation_log.append("user", "python generators")

        entries = await conversation_log.search("rust")

        assert [e.content for e in entries] == ["rust ownership rules"]

    async def test_conversations(self, conversation_log):
        await conversation_log.save_conversation("hi", "hello!", "default")
        await conversation_log.save_conversation("how are you", "fine", "ada")

        turns = await conversation_log.get_recent_conversations(limit=10)

        assert [t.user_input for t in turns] == ["how are you", "hi"]
        assert turns[0].personality == "ada"

    async def test_knowledge_base_replaces_by_key(self, conversation_log):
        await conversation_log.save_knowledge("lang", "rust")
        await conversation_log.save_knowledge("lang", "python")

        assert await conversation_log.get_knowledge("lang") == "python"
        assert await conversation_log.get_knowledge("missing") is None

    async def test_document_insights_ordered_by_relevance(self, conversation_log):
        await conversation_log.save_document_insight("paper.pdf", "minor point", 0.3, "insight")
        await conversation_log.save_document_insight("paper.pdf", "key finding", 0.95, "insight")
        await conversation_log.save_document_insight("other.pdf", "unrelated", 0.99, "insight")

        rows = await conversation_log.get_document_insights("paper.pdf")

        assert [r.insight_text for r in rows] == ["key finding", "minor point"]

    async def test_search_document_insights(self, conversation_log):
        await conversation_log.save_document_insight("a.pdf", "caching strategy", 0.5, "insight")
        await conversation_log.save_document_insight("b.pdf", "caching layer", 0.9, "insight")
        await conversation_log.save_document_insight("b.pdf", "logging", 0.9, "insight")

        rows = await conversation_log.search_document_insights("caching")

        assert [r.document_path for r in rows] == ["b.pdf", "a.pdf"]

    async def test_in_memory_database(self):
        log = ConversationLog(db_path=":memory:")
        await log.initialize()
        await log.append("system", "boot")

        assert len(await log.recent()) == 1
        await log.close()
