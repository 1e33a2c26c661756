"""
Fixtures for service tests.
"""

import pytest

from contextmem.services.chat_manager import ChatManager
from contextmem.services.context_assembler import ContextAssembler


@pytest.fixture
def assembler(memory_store):
    return ContextAssembler(memory_store, max_context_chars=4000, recent_limit=5, similar_limit=10)


@pytest.fixture
def chat_manager(fake_llm, fake_embedder, memory_store, session_manager, assembler):
    return ChatManager(
        llm=fake_llm,
        embedder=fake_embedder,
        memory_store=memory_store,
        session_manager=session_manager,
        assembler=assembler,
    )
