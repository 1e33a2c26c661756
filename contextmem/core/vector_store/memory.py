"""
In-process vector index.

Keeps vectors in numpy arrays and ranks by cosine similarity. Used for local
runs without a Qdrant server and in tests.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from contextmem.core.vector_store.base import SearchHit, VectorIndex
from contextmem.utils.exceptions import VectorStoreError
from contextmem.utils.id_generator import generate_point_id
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class _Collection:
    dimension: int
    ids: list[str] = field(default_factory=list)
    vectors: list[np.ndarray] = field(default_factory=list)
    payloads: list[dict[str, Any]] = field(default_factory=list)


class InMemoryVectorIndex(VectorIndex):
    """
    Local in-memory vector index.

    Ties in similarity (for instance every score for an all-zero query) are
    broken by insertion order.
    """

    def __init__(self):
        self._collections: dict[str, _Collection] = {}
        self._lock = asyncio.Lock()

    def _get(self, name: str) -> _Collection:
        collection = self._collections.get(name)
        if collection is None:
            raise VectorStoreError(f"Collection not found: {name}", context={"collection": name})
        return collection

    async def create_collection(self, name: str, dimension: int) -> None:
        async with self._lock:
            if name in self._collections:
                logger.info(f"Collection {name} already exists, skipping creation")
                return
            self._collections[name] = _Collection(dimension=dimension)
            logger.debug(f"Created in-memory collection {name}", extra={"dimension": dimension})

    async def upsert(self, collection: str, vector: list[float], payload: dict[str, Any]) -> str:
        ids = await self.upsert_batch(collection, [(vector, payload)])
        return ids[0]

    async def upsert_batch(
        self, collection: str, points: list[tuple[list[float], dict[str, Any]]]
    ) -> list[str]:
        async with self._lock:
            target = self._get(collection)
            for vector, _ in points:
                if len(vector) != target.dimension:
                    raise VectorStoreError(
                        f"Wrong vector size for {collection}: expected {target.dimension}, "
                        f"got {len(vector)}"
                    )

            ids = []
            for vector, payload in points:
                point_id = generate_point_id()
                target.ids.append(point_id)
                target.vectors.append(np.asarray(vector, dtype=np.float32))
                target.payloads.append(dict(payload))
                ids.append(point_id)
            return ids

    async def search(self, collection: str, vector: list[float], limit: int) -> list[SearchHit]:
        async with self._lock:
            target = self._get(collection)
            if len(vector) != target.dimension:
                raise VectorStoreError(
                    f"Wrong query size for {collection}: expected {target.dimension}, "
                    f"got {len(vector)}"
                )
            if not target.ids or limit <= 0:
                return []

            matrix = np.vstack(target.vectors)
            norms = np.linalg.norm(matrix, axis=1)
            norms[norms == 0] = 1  # Avoid division by zero

            query = np.asarray(vector, dtype=np.float32)
            query_norm = np.linalg.norm(query)
            if query_norm == 0:
                similarities = np.zeros(len(target.ids), dtype=np.float32)
            else:
                similarities = (matrix @ query) / (norms * query_norm)

            order = np.argsort(-similarities, kind="stable")[:limit]
            return [
                SearchHit(
                    id=target.ids[i],
                    score=float(similarities[i]),
                    payload=dict(target.payloads[i]),
                )
                for i in order
            ]

    async def delete(self, collection: str, ids: list[str]) -> None:
        async with self._lock:
            target = self._get(collection)
            doomed = set(ids)
            keep = [i for i, point_id in enumerate(target.ids) if point_id not in doomed]
            target.ids = [target.ids[i] for i in keep]
            target.vectors = [target.vectors[i] for i in keep]
            target.payloads = [target.payloads[i] for i in keep]

    async def count(self, collection: str) -> int:
        async with self._lock:
            return len(self._get(collection).ids)

    async def close(self) -> None:
        """Nothing to release."""
        pass
