"""
Embedding backend interface.

Every vector stored in or queried against a collection must have the
configured dimension; ``embed_checked`` is the entry point the pipelines use
so a misconfigured model fails loudly instead of writing unusable points.
"""

from abc import ABC, abstractmethod

from contextmem.utils.vectors import ensure_dimension


class Embedder(ABC):
    """Abstract embedding backend."""

    @abstractmethod
    async def embed(self, text: str, **kwargs) -> list[float]:
        """
        Embed one text.

        Raises:
            ValidationError: If text is empty
            EmbeddingError: If the backend call fails
        """
        pass

    async def embed_checked(self, text: str, dimension: int, **kwargs) -> list[float]:
        """
        Embed text and validate the vector length.

        Raises:
            EmbeddingError: If embedding generation fails
            DimensionError: If the backend returned a vector of another length
        """
        return ensure_dimension(await self.embed(text, **kwargs), dimension)

    @abstractmethod
    async def close(self):
        pass
