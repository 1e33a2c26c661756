"""
Factory for creating vector index backends.
"""

from collections.abc import Callable
from urllib.parse import urlparse

from contextmem.config import QdrantConfig
from contextmem.core.vector_store.base import VectorIndex
from contextmem.core.vector_store.memory import InMemoryVectorIndex
from contextmem.core.vector_store.qdrant import QdrantIndex
from contextmem.utils.exceptions import ConfigurationError

VectorIndexConstructor = Callable[[QdrantConfig], VectorIndex]


def _create_qdrant(config: QdrantConfig) -> VectorIndex:
    # Parse URL to extract host and port
    parsed = urlparse(config.url)
    host = parsed.hostname or "localhost"
    port = parsed.port or 6333

    return QdrantIndex(
        host=host,
        port=port,
        use_grpc=config.use_grpc,
        timeout=config.timeout,
    )


def _create_memory(config: QdrantConfig) -> VectorIndex:
    return InMemoryVectorIndex()


class VectorIndexFactory:
    """Factory for creating vector index backends from configuration."""

    _registry: dict[str, VectorIndexConstructor] = {
        "qdrant": _create_qdrant,
        "memory": _create_memory,
    }

    @classmethod
    def register(cls, name: str, constructor: VectorIndexConstructor) -> None:
        cls._registry[name] = constructor

    @classmethod
    def backends(cls) -> list[str]:
        return sorted(cls._registry)

    @classmethod
    def create(cls, backend: str, config: QdrantConfig) -> VectorIndex:
        """
        Create vector index from configuration.

        Args:
            backend: Registered backend name ("qdrant" or "memory")
            config: Qdrant connection settings (ignored by the memory backend)

        Raises:
            ConfigurationError: If backend is not supported
        """
        constructor = cls._registry.get(backend)
        if constructor is None:
            raise ConfigurationError(
                f"Unsupported vector backend: {backend}",
                context={"available": cls.backends()},
            )
        return constructor(config)
