"""
Qdrant vector index implementation
"""

from typing import Any

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from contextmem.core.vector_store.base import SearchHit, VectorIndex
from contextmem.utils.exceptions import VectorStoreError
from contextmem.utils.id_generator import generate_point_id
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


class QdrantIndex(VectorIndex):
    """
    Qdrant-backed vector index.

    Features:
    - Lazy async connection (HTTP or gRPC)
    - Cosine distance collections
    - uuid4 point ids
    - Native batch upsert
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6333,
        use_grpc: bool = False,
        timeout: int = 30,
    ):
        """
        Initialize Qdrant index.

        Args:
            host: Qdrant host
            port: Qdrant port (6333 for HTTP, 6334 for gRPC)
            use_grpc: Use gRPC connection
            timeout: Request timeout in seconds
        """
        self.host = host
        self.port = port
        self.use_grpc = use_grpc
        self.timeout = timeout
        self.client: AsyncQdrantClient | None = None

    async def connect(self) -> None:
        """
        Establish connection to Qdrant.

        Raises:
            VectorStoreError: If connection fails
        """
        if self.client is None:
            try:
                self.client = AsyncQdrantClient(
                    host=self.host,
                    port=self.port,
                    prefer_grpc=self.use_grpc,
                    timeout=self.timeout,
                )
            except Exception as e:
                logger.error(
                    f"Failed to connect to Qdrant: {e}",
                    extra={"host": self.host, "port": self.port, "error": str(e)},
                )
                raise VectorStoreError(f"Failed to connect to Qdrant: {e}") from e

    async def create_collection(self, name: str, dimension: int) -> None:
        try:
            await self.connect()

            collections = await self.client.get_collections()
            if name in [col.name for col in collections.collections]:
                logger.info(f"Collection {name} already exists, skipping creation")
                return

            await self.client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=dimension, distance=Distance.COSINE),
            )
            logger.info(f"Created collection {name}", extra={"dimension": dimension})
        except VectorStoreError:
            raise
        except Exception as e:
            if "already exists" in str(e).lower():
                logger.info(f"Collection {name} already exists, skipping creation")
                return
            logger.error(
                f"Failed to create Qdrant collection: {e}",
                extra={"collection": name, "error": str(e)},
            )
            raise VectorStoreError(f"Failed to create Qdrant collection: {e}") from e

    async def upsert(self, collection: str, vector: list[float], payload: dict[str, Any]) -> str:
        ids = await self.upsert_batch(collection, [(vector, payload)])
        return ids[0]

    async def upsert_batch(
        self, collection: str, points: list[tuple[list[float], dict[str, Any]]]
    ) -> list[str]:
        if not points:
            return []

        try:
            await self.connect()

            ids = [generate_point_id() for _ in points]
            structs = [
                PointStruct(id=point_id, vector=list(vector), payload=payload)
                for point_id, (vector, payload) in zip(ids, points)
            ]

            await self.client.upsert(
                collection_name=collection,
                points=structs,
                wait=True,  # Wait for write to complete for consistency
            )
            return ids
        except VectorStoreError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to upsert into {collection}: {e}",
                extra={"collection": collection, "points": len(points), "error": str(e)},
            )
            raise VectorStoreError(f"Failed to upsert points: {e}") from e

    async def search(self, collection: str, vector: list[float], limit: int) -> list[SearchHit]:
        try:
            await self.connect()

            response = await self.client.query_points(
                collection_name=collection,
                query=list(vector),
                limit=limit,
                with_payload=True,
            )
        except VectorStoreError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to search {collection}: {e}",
                extra={"collection": collection, "limit": limit, "error": str(e)},
            )
            raise VectorStoreError(f"Failed to search vectors: {e}") from e

        return [
            SearchHit(id=str(point.id), score=point.score, payload=point.payload or {})
            for point in response.points
        ]

    async def delete(self, collection: str, ids: list[str]) -> None:
        if not ids:
            return

        try:
            await self.connect()

            await self.client.delete(
                collection_name=collection,
                points_selector=list(ids),
                wait=True,  # Wait for delete to complete for consistency
            )
        except VectorStoreError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to delete from {collection}: {e}",
                extra={"collection": collection, "ids": len(ids), "error": str(e)},
            )
            raise VectorStoreError(f"Failed to delete vectors: {e}") from e

    async def close(self) -> None:
        """Close the connection to Qdrant."""
        if self.client is not None:
            await self.client.close()
            self.client = None
