"""Processed-chunk cache."""

from contextmem.core.cache.embedding_cache import EmbeddingCache

__all__ = ["EmbeddingCache"]
