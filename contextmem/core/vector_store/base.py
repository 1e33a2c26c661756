"""
Base interface for vector storage

Minimal collection-oriented contract: create collection, upsert (vector, payload),
k-NN search and delete by id. Payloads are plain JSON-compatible dicts.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """Vector search hit."""

    id: str
    score: float
    payload: dict[str, Any] = Field(default_factory=dict)


class VectorIndex(ABC):
    """Abstract base class for vector index implementations."""

    @abstractmethod
    async def create_collection(self, name: str, dimension: int) -> None:
        """
        Create a collection of fixed-dimension vectors (cosine distance).

        Idempotent: an existing collection is not an error.

        Raises:
            VectorStoreError: If creation fails
        """
        pass

    @abstractmethod
    async def upsert(self, collection: str, vector: list[float], payload: dict[str, Any]) -> str:
        """
        Store one vector with its payload.

        Returns:
            The index-assigned point id

        Raises:
            VectorStoreError: If the upsert fails
        """
        pass

    async def upsert_batch(
        self, collection: str, points: list[tuple[list[float], dict[str, Any]]]
    ) -> list[str]:
        """
        Store several vectors in one call.

        Default implementation upserts one by one.
        Override for backends with a native batch write.

        Returns:
            Point ids in input order
        """
        ids = []
        for vector, payload in points:
            ids.append(await self.upsert(collection, vector, payload))
        return ids

    @abstractmethod
    async def search(self, collection: str, vector: list[float], limit: int) -> list[SearchHit]:
        """
        k-NN search.

        Returns:
            Hits ranked by descending similarity

        Raises:
            VectorStoreError: If the search fails
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, ids: list[str]) -> None:
        """
        Delete points by id.

        Raises:
            VectorStoreError: If the deletion fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection to the vector index."""
        pass
