"""
Tests for the document insight pipeline.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from contextmem.core.cache.embedding_cache import EmbeddingCache
from contextmem.core.chunking.chunker import PAGE_MARKER, DocumentChunker
from contextmem.services.insight_extractor import EMBEDDING_CONCURRENCY, InsightExtractor
from contextmem.utils.exceptions import LLMError, VectorStoreError


def chunk_text_of(prompt: str) -> str:
    return prompt.split("Text to analyze:\n")[1].split("\n\nRespond")[0]


def insight_responder(prompt: str) -> str:
    if prompt.startswith("Summarize this text from page"):
        return "page summary"
    return json.dumps([{"text": f"insight: {chunk_text_of(prompt)}", "relevance": 0.9}])


def five_chunk_document() -> str:
    return " ".join(f"c{i}a c{i}b" for i in range(5))


@pytest.fixture
def extractor(fake_llm, fake_embedder, memory_index, dimension):
    fake_llm.responder = insight_responder
    return InsightExtractor(
        fake_llm,
        fake_embedder,
        memory_index,
        cache=EmbeddingCache(capacity=100),
        chunker=DocumentChunker(chunk_size_words=2),
        collection_name="chunks",
        dimension=dimension,
    )


@pytest.mark.unit
@pytest.mark.asyncio
class TestInsightExtraction:
    """Test single-text extraction."""

    async def test_extract_insights(self, extractor):
        insights = await extractor.extract_insights("caching layer")

        assert [i.text for i in insights] == ["insight: caching layer"]

    async def test_extract_insights_embeds_and_indexes_each_insight(
        self, extractor, fake_embedder, memory_index, dimension
    ):
        await extractor.initialize()

        insights = await extractor.extract_insights("caching layer", {"doc": "a.pdf"})

        assert "insight: caching layer" in fake_embedder.calls
        assert len(insights[0].embedding) == dimension
        assert insights[0].metadata == {"doc": "a.pdf"}
        assert await memory_index.count("document_insights") == 1

    async def test_failed_insight_embedding_is_not_indexed(
        self, extractor, fake_embedder, memory_index
    ):
        await extractor.initialize()
        fake_embedder.fail_texts = {"insight: caching layer"}

        insights = await extractor.extract_insights("caching layer")

        assert insights[0].embedding is None
        assert await memory_index.count("document_insights") == 0

    async def test_extract_insights_propagates_completion_failure(self, extractor, fake_llm):
        fake_llm.fail_on = "caching"
        with pytest.raises(LLMError):
            await extractor.extract_insights("caching layer")

    async def test_quick_analyze(self, extractor, fake_llm):
        fake_llm.responder = "It is about caching."

        assert await extractor.quick_analyze("caching layer") == "It is about caching."
        assert "caching layer" in fake_llm.prompts[0]


@pytest.mark.unit
@pytest.mark.asyncio
class TestProcess:
    """Test the chunk, extract, embed, index and cache pipeline."""

    async def test_process_returns_insights_in_chunk_order(self, extractor, memory_index):
        await extractor.initialize()

        insights = await extractor.process(five_chunk_document())

        assert [i.text for i in insights] == [f"insight: c{i}a c{i}b" for i in range(5)]
        assert await memory_index.count("chunks") == 5
        assert await memory_index.count("document_insights") == 5
        assert len(extractor.cache) == 5

    async def test_insights_carry_provenance_and_embedding(self, extractor, dimension):
        await extractor.initialize()

        insights = await extractor.process("one two" + PAGE_MARKER + "three four", {"doc": "a.pdf"})

        assert insights[0].metadata == {"page": 1, "chunk": 0, "doc": "a.pdf"}
        assert insights[1].metadata == {"page": 2, "chunk": 1, "doc": "a.pdf"}
        assert len(insights[0].embedding) == dimension

    async def test_embedding_failure_keeps_insights_but_skips_index(
        self, extractor, fake_embedder, memory_index
    ):
        """One failed embedding out of five: five insights, four indexed chunks."""
        await extractor.initialize()
        fake_embedder.fail_texts = {"c2a c2b"}

        insights = await extractor.process(five_chunk_document())

        assert len(insights) == 5
        assert extractor.cache.get("page_1_chunk_2").embedding is None
        assert insights[2].embedding is not None
        assert await memory_index.count("chunks") == 4
        assert await memory_index.count("document_insights") == 5

    async def test_wrong_dimension_is_treated_as_embedding_failure(
        self, extractor, fake_embedder, memory_index
    ):
        await extractor.initialize()
        fake_embedder.vectors = {"c0a c0b": [1.0, 0.0]}

        insights = await extractor.process(five_chunk_document())

        assert len(insights) == 5
        assert await memory_index.count("chunks") == 4

    async def test_completion_failure_drops_chunk(self, extractor, fake_llm, memory_index):
        await extractor.initialize()
        fake_llm.fail_on = "c1a c1b"

        insights = await extractor.process(five_chunk_document())

        assert len(insights) == 4
        assert "page_1_chunk_1" not in extractor.cache
        assert await memory_index.count("chunks") == 4

    async def test_cache_hit_makes_no_backend_calls(self, extractor, fake_llm, fake_embedder):
        await extractor.initialize()
        first = await extractor.process(five_chunk_document())
        prompts, calls = len(fake_llm.prompts), len(fake_embedder.calls)

        second = await extractor.process(five_chunk_document())

        assert second == first
        assert len(fake_llm.prompts) == prompts
        assert len(fake_embedder.calls) == calls

    async def test_upsert_failure_is_swallowed(self, extractor, memory_index):
        await extractor.initialize()
        memory_index.upsert_batch = AsyncMock(side_effect=VectorStoreError("index down"))

        insights = await extractor.process(five_chunk_document())

        assert len(insights) == 5
        assert len(extractor.cache) == 5
        collections = [call.args[0] for call in memory_index.upsert_batch.await_args_list]
        assert collections == ["chunks", "document_insights"]

    async def test_empty_document(self, extractor, fake_llm):
        await extractor.initialize()

        assert await extractor.process("") == []
        assert fake_llm.prompts == []

    async def test_embedding_concurrency_is_bounded(self, extractor, fake_embedder, dimension):
        await extractor.initialize()
        in_flight = 0
        peak = 0

        async def slow_embed(text, **kwargs):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return [1.0] * dimension

        fake_embedder.embed = slow_embed
        document = " ".join(f"w{i}" for i in range(100))

        await extractor.process(document)

        assert peak == EMBEDDING_CONCURRENCY

    async def test_backend_calls_share_one_bound(self, extractor, fake_llm, fake_embedder):
        """Completion and embedding calls together stay within the worker limit."""
        await extractor.initialize()
        in_flight = 0
        peak = 0
        complete, embed = fake_llm.complete, fake_embedder.embed

        def tracked(call):
            async def wrapper(*args, **kwargs):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                try:
                    return await call(*args, **kwargs)
                finally:
                    in_flight -= 1

            return wrapper

        fake_llm.complete = tracked(complete)
        fake_embedder.embed = tracked(embed)

        insights = await extractor.process(" ".join(f"w{i}" for i in range(100)))

        assert len(insights) == 50
        assert peak <= EMBEDDING_CONCURRENCY

    async def test_document_id_namespaces_the_cache(self, extractor):
        await extractor.initialize()

        first = await extractor.process("alpha beta", document_id="a.txt")
        second = await extractor.process("gamma delta", document_id="b.txt")

        assert [i.text for i in first] == ["insight: alpha beta"]
        assert [i.text for i in second] == ["insight: gamma delta"]
        assert "a.txt:page_1_chunk_0" in extractor.cache
        assert "b.txt:page_1_chunk_0" in extractor.cache

    async def test_documents_without_id_share_cache_positions(self, extractor, fake_llm):
        await extractor.initialize()
        await extractor.process("alpha beta")
        prompts = len(fake_llm.prompts)

        second = await extractor.process("gamma delta")

        assert [i.text for i in second] == ["insight: alpha beta"]
        assert len(fake_llm.prompts) == prompts


@pytest.fixture
async def two_page_extractor(extractor, fake_embedder, dimension):
    """Extractor holding a two page document with orthogonal chunk vectors."""
    apple = [0.0] * dimension
    apple[0] = 1.0
    cherry = [0.0] * dimension
    cherry[1] = 1.0
    fake_embedder.vectors = {"apple banana": apple, "cherry grape": cherry}

    await extractor.initialize()
    await extractor.process("apple banana" + PAGE_MARKER + "cherry grape")
    return extractor


@pytest.mark.unit
@pytest.mark.asyncio
class TestRetrieval:
    """Test chunk search and page summaries."""

    async def test_search_returns_matching_chunk_first(self, two_page_extractor):
        results = await two_page_extractor.search("cherry grape", limit=2)

        assert results[0][0] == "cherry grape"
        assert results[0][1] == pytest.approx(1.0)
        assert results[1][1] == pytest.approx(0.0)

    async def test_search_insights_queries_insight_collection(
        self, extractor, fake_embedder, dimension
    ):
        first = [0.0] * dimension
        first[2] = 1.0
        second = [0.0] * dimension
        second[3] = 1.0
        fake_embedder.vectors = {
            "insight: apple banana": first,
            "insight: cherry grape": second,
        }
        await extractor.initialize()
        await extractor.process("apple banana" + PAGE_MARKER + "cherry grape")

        results = await extractor.search_insights("insight: cherry grape", limit=2)

        assert results[0] == ("insight: cherry grape", pytest.approx(1.0))
        assert results[1][0] == "insight: apple banana"

    async def test_search_document_uses_cached_context(self, two_page_extractor):
        results = await two_page_extractor.search_document("cherry grape", limit=1)

        assert results[0].page_number == 2
        assert results[0].chunk_index == 1
        assert results[0].context == "cherry grape"

    async def test_document_summary(self, two_page_extractor):
        summary = await two_page_extractor.get_document_summary()

        assert summary == "\nPage 1: page summary\n\nPage 2: page summary\n"

    async def test_document_summary_page_range(self, two_page_extractor):
        assert await two_page_extractor.get_document_summary((2, 2)) == "\nPage 2: page summary\n"

    async def test_document_summary_skips_failed_pages(self, two_page_extractor, fake_llm):
        fake_llm.fail_on = "page 1 "

        assert await two_page_extractor.get_document_summary() == "\nPage 2: page summary\n"
