"""
Vector index implementations for contextmem.

Provides abstract base and concrete implementations for vector storage.
"""

from contextmem.core.vector_store.base import SearchHit, VectorIndex
from contextmem.core.vector_store.memory import InMemoryVectorIndex
from contextmem.core.vector_store.qdrant import QdrantIndex

__all__ = [
    "VectorIndex",
    "SearchHit",
    "QdrantIndex",
    "InMemoryVectorIndex",
]
