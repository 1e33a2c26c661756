"""
Tests for utility helpers: ids, vectors, bounded concurrency and exceptions.
"""

import asyncio
from uuid import UUID

import pytest

from contextmem.utils import (
    ContextMemError,
    DimensionError,
    EmbeddingError,
    LLMError,
    LogStoreError,
    ProviderError,
    StoreError,
    VectorStoreError,
    bounded_gather,
    ensure_dimension,
    generate_chunk_key,
    generate_point_id,
    generate_session_id,
    get_logger,
    zero_vector,
)


class TestIdGenerators:
    """Tests for id generation."""

    def test_session_id_is_uuid(self):
        session_id = generate_session_id()
        assert UUID(session_id).version == 4

    def test_point_ids_unique(self):
        ids = [generate_point_id() for _ in range(1000)]
        assert len(ids) == len(set(ids))

    def test_chunk_key_format(self):
        assert generate_chunk_key(3, 17) == "page_3_chunk_17"

    def test_chunk_key_with_document_namespace(self):
        assert generate_chunk_key(3, 17, "notes.txt") == "notes.txt:page_3_chunk_17"


class TestVectors:
    """Tests for vector helpers."""

    def test_ensure_dimension_accepts_exact_length(self):
        assert ensure_dimension((0.1, 0.2), 2) == [0.1, 0.2]

    def test_ensure_dimension_rejects_mismatch(self):
        with pytest.raises(DimensionError) as exc_info:
            ensure_dimension([0.1, 0.2, 0.3], 2)

        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3
        assert "expected 2, got 3" in str(exc_info.value)

    def test_zero_vector(self):
        assert zero_vector(4) == [0.0, 0.0, 0.0, 0.0]


@pytest.mark.asyncio
class TestBoundedGather:
    """Tests for the worker-limited parallel map."""

    async def test_preserves_input_order(self):
        async def delayed(n):
            await asyncio.sleep(0.001 * (5 - n))
            return n * 10

        assert await bounded_gather(delayed, [1, 2, 3, 4], limit=4) == [10, 20, 30, 40]

    async def test_never_exceeds_limit(self):
        in_flight = 0
        peak = 0

        async def work(_):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.001)
            in_flight -= 1

        await bounded_gather(work, range(50), limit=20)

        assert peak == 20

    async def test_return_exceptions(self):
        async def maybe_fail(n):
            if n == 2:
                raise ValueError("two")
            return n

        results = await bounded_gather(maybe_fail, [1, 2, 3], limit=2, return_exceptions=True)

        assert results[0] == 1
        assert isinstance(results[1], ValueError)
        assert results[2] == 3

    async def test_failure_cancels_pending_calls(self):
        cancelled = []

        async def work(n):
            if n == 0:
                await asyncio.sleep(0)
                raise RuntimeError("boom")
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(n)
                raise

        with pytest.raises(RuntimeError):
            await bounded_gather(work, [0, 1, 2, 3], limit=2)
        await asyncio.sleep(0.01)

        assert sorted(cancelled) == [1]

    async def test_invalid_limit(self):
        async def noop(_):
            return None

        with pytest.raises(ValueError):
            await bounded_gather(noop, [1], limit=0)


class TestExceptionHierarchy:
    """Tests for the exception taxonomy."""

    def test_provider_errors(self):
        assert issubclass(LLMError, ProviderError)
        assert issubclass(EmbeddingError, ProviderError)
        assert issubclass(ProviderError, ContextMemError)

    def test_store_errors(self):
        assert issubclass(VectorStoreError, StoreError)
        assert issubclass(LogStoreError, StoreError)

    def test_context_is_kept(self):
        error = ContextMemError("failed", context={"collection": "x"})
        assert error.message == "failed"
        assert error.context == {"collection": "x"}


class TestLogging:
    """Tests for loguru setup."""

    def test_file_sink_creates_log_dir(self, tmp_path):
        from loguru import logger

        from contextmem.config import LoggingConfig
        from contextmem.utils.logger import setup_logging_from_config

        log_dir = tmp_path / "logs"
        setup_logging_from_config(LoggingConfig(log_to_file=True, log_dir=str(log_dir)))
        try:
            get_logger("tests").info("hello", extra={"case": "file sink"})
            logger.complete()
            assert log_dir.is_dir()
        finally:
            logger.remove()
