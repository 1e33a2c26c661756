"""
Semantic search over indexed text snippets (web pages, research notes, ...).
"""

from typing import Any

from contextmem.core.vector_store.base import VectorIndex
from contextmem.models.search import SearchResult
from contextmem.utils.logger import get_logger
from contextmem.utils.vectors import ensure_dimension

logger = get_logger(__name__)


class SemanticSearch:
    """
    Index and search text with a source label.

    Payload: ``{"text", "source", "metadata"?}``. Hits missing text or source
    are skipped.
    """

    def __init__(
        self,
        index: VectorIndex,
        collection_name: str = "semantic_search",
        dimension: int = 1536,
    ):
        self.index = index
        self.collection_name = collection_name
        self.dimension = dimension

    async def initialize(self) -> None:
        await self.index.create_collection(self.collection_name, self.dimension)

    async def index_text(
        self,
        text: str,
        source: str,
        embedding: list[float],
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """
        Index one text.

        Raises:
            DimensionError: If the embedding length is wrong
            VectorStoreError: If the index write fails
        """
        payload: dict[str, Any] = {"text": text, "source": source}
        if metadata is not None:
            payload["metadata"] = metadata

        return await self.index.upsert(
            self.collection_name, ensure_dimension(embedding, self.dimension), payload
        )

    async def search(self, query_embedding: list[float], limit: int = 5) -> list[SearchResult]:
        """
        k-NN search over indexed snippets.

        Raises:
            DimensionError: If the query length is wrong
        """
        query = ensure_dimension(query_embedding, self.dimension)
        hits = await self.index.search(self.collection_name, query, limit)

        results = []
        for hit in hits:
            text, source = hit.payload.get("text"), hit.payload.get("source")
            if not isinstance(text, str) or not isinstance(source, str):
                continue
            results.append(
                SearchResult(
                    text=text, score=hit.score, source=source, metadata=hit.payload.get("metadata")
                )
            )
        return results

    async def search_by_source(
        self, query_embedding: list[float], source: str, limit: int = 5
    ) -> list[SearchResult]:
        """Search twice as deep, then keep hits from ``source`` only."""
        results = await self.search(query_embedding, limit * 2)
        return [r for r in results if r.source == source][:limit]

    @staticmethod
    def format_results(results: list[SearchResult]) -> str:
        return "".join(
            f"{i}. [Score: {r.score:.2f}] {r.text} (Source: {r.source})\n"
            for i, r in enumerate(results, start=1)
        )
