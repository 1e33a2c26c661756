"""
Factory modules for creating contextmem components.

Provides registry-backed factories for LLM, Embedder and Vector Index backends.
"""

from contextmem.core.factory.backend import ActiveBackend
from contextmem.core.factory.embedder_factory import EmbedderFactory
from contextmem.core.factory.llm_factory import LLMFactory
from contextmem.core.factory.vector_factory import VectorIndexFactory

__all__ = [
    "ActiveBackend",
    "LLMFactory",
    "EmbedderFactory",
    "VectorIndexFactory",
]
