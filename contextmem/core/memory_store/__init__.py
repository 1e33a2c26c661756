"""Conversational memory store."""

from contextmem.core.memory_store.memory_store import MemoryStore

__all__ = [
    "MemoryStore",
]
