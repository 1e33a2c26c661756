"""
Shared test fixtures.

Backends are replaced by small deterministic fakes so the pipeline tests run
without Qdrant, Ollama or OpenAI. Vectors use a small dimension to keep
assertions readable.
"""

import hashlib
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from contextmem.core.embeddings.base import Embedder
from contextmem.core.llm.base import LLMProvider
from contextmem.core.memory_store import MemoryStore
from contextmem.core.session.session_manager import SessionManager
from contextmem.core.vector_store.memory import InMemoryVectorIndex
from contextmem.utils.exceptions import EmbeddingError, LLMError

DIMENSION = 8


class FakeEmbedder(Embedder):
    """Deterministic bag-of-words embedder (word hash -> vector slot)."""

    def __init__(self, dimension: int = DIMENSION):
        self.dimension = dimension
        self.calls: list[str] = []
        self.fail_texts: set[str] = set()
        self.vectors: dict[str, list[float]] = {}

    async def embed(self, text: str, **kwargs) -> list[float]:
        self.calls.append(text)
        if text in self.fail_texts:
            raise EmbeddingError(f"embedding failed for {text[:20]}")
        if text in self.vectors:
            return list(self.vectors[text])

        vector = [0.0] * self.dimension
        for word in text.lower().split():
            slot = int(hashlib.md5(word.encode()).hexdigest(), 16) % self.dimension
            vector[slot] += 1.0
        return vector

    async def close(self):
        pass


class FakeLLM(LLMProvider):
    """Completion backend answering through a responder callable."""

    def __init__(self, responder: Callable[[str], str] | str = "ok"):
        super().__init__()
        self.responder = responder
        self.prompts: list[str] = []
        self.fail_on: str | None = None
        self.closed = False

    async def complete(self, prompt, max_tokens=None, temperature=None, **kwargs) -> str:
        self.prompts.append(prompt)
        if self.fail_on and self.fail_on in prompt:
            raise LLMError("completion failed")
        if callable(self.responder):
            return self.responder(prompt)
        return self.responder

    def describe_model(self) -> str:
        return "fake:test-model"

    async def close(self):
        self.closed = True


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def dimension():
    return DIMENSION


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_manager(clock):
    return SessionManager(window_minutes=30, clock=clock)


@pytest.fixture
async def memory_index():
    index = InMemoryVectorIndex()
    yield index
    await index.close()


@pytest.fixture
async def memory_store(memory_index, session_manager, clock, dimension):
    store = MemoryStore(
        memory_index, session_manager, collection_name="memories", dimension=dimension, clock=clock
    )
    await store.initialize()
    return store
