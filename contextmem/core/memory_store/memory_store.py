"""
Conversational memory store.

Single entry point for reading and writing conversational turns. Records are
kept in a vector index collection; the payload of every point is the JSON form
of a MemoryRecord.

Key responsibilities:
- Dimension-checked writes tagged with the current session
- k-NN retrieval and payload decoding
- Recency, session and topic views over a bounded candidate set
- Retention cleanup
- Tagging and summarization through the completion backend
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from contextmem.core.llm.base import LLMProvider
from contextmem.core.session.session_manager import SessionManager
from contextmem.core.vector_store.base import SearchHit, VectorIndex
from contextmem.models.memory import MemoryRecord, MemoryRole, clamp_importance, utc_now
from contextmem.utils.exceptions import ValidationError
from contextmem.utils.logger import get_logger
from contextmem.utils.vectors import ensure_dimension, zero_vector

logger = get_logger(__name__)

TAG_PROMPT = (
    "Analyze the following message and:\n"
    "1. Extract 1-3 topic tags (single words)\n"
    "2. Rate its importance (0.0-1.0) for future context\n"
    "Format: tag1,tag2,tag3|importance\n\n"
    "Message: {text}\n\n"
    "Tags|Importance:"
)

SUMMARY_PROMPT = "Summarize the key points of this conversation in 2-3 sentences:\n\n{conversation}"

NO_SESSION_SUMMARY = "No conversation found for this session."


class MemoryStore:
    """
    Vector-index backed store of MemoryRecords.

    ``get_recent``, ``search_by_session``, ``get_topic_context`` and
    ``cleanup_old`` all work on the candidate set returned by an all-zero
    query vector, capped at ``scan_limit`` points. This is an approximation:
    the index does not offer a time-ordered scan.
    """

    def __init__(
        self,
        index: VectorIndex,
        session_manager: SessionManager,
        collection_name: str = "conversation_memory",
        dimension: int = 1536,
        scan_limit: int = 100,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize MemoryStore.

        Args:
            index: Vector index holding the memory collection
            session_manager: Source of the current session id
            collection_name: Collection used for conversational memory
            dimension: Required embedding length
            scan_limit: Candidate set size for zero-vector scans
            clock: Time source (injectable for tests)
        """
        self.index = index
        self.session_manager = session_manager
        self.collection_name = collection_name
        self.dimension = dimension
        self.scan_limit = scan_limit
        self._clock = clock

    async def initialize(self) -> None:
        """Create the memory collection if it does not exist."""
        await self.index.create_collection(self.collection_name, self.dimension)

    # ═══════════════════════════════════════════════════════════
    # WRITES
    # ═══════════════════════════════════════════════════════════

    async def store(
        self,
        text: str,
        role: str | MemoryRole,
        embedding: list[float],
        metadata: dict[str, Any] | None = None,
        importance: float = 1.0,
        topic_tags: set[str] | None = None,
    ) -> str:
        """
        Store one conversational turn.

        Args:
            text: Turn text
            role: Speaker or source role
            embedding: Embedding of ``text``
            metadata: Optional caller metadata
            importance: Importance, clamped into [0, 1]
            topic_tags: Optional topic tags

        Returns:
            Id assigned by the vector index

        Raises:
            DimensionError: If the embedding length is wrong
            ValidationError: If text or role is empty
            VectorStoreError: If the index write fails
        """
        vector = ensure_dimension(embedding, self.dimension)

        try:
            record = MemoryRecord(
                text=text,
                role=role,
                timestamp=self._clock(),
                session_id=self.session_manager.current_session_id(),
                importance=importance,
                topic_tags=frozenset(topic_tags or ()),
                metadata=metadata,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid memory record: {e}") from e

        point_id = await self.index.upsert(self.collection_name, vector, self._to_payload(record))
        logger.debug(
            f"Stored memory {point_id}",
            extra={"role": record.role, "session_id": record.session_id},
        )
        return point_id

    # ═══════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════

    async def search_similar(self, query_embedding: list[float], limit: int) -> list[MemoryRecord]:
        """
        k-NN search in index ranking order.

        Points whose payload cannot be decoded are dropped.

        Raises:
            DimensionError: If the query length is wrong
        """
        query = ensure_dimension(query_embedding, self.dimension)
        hits = await self.index.search(self.collection_name, query, limit)
        return [record for _, record in self._decode_hits(hits)]

    async def get_recent(self, limit: int) -> list[MemoryRecord]:
        """
        Zero-vector search, newest first.

        The candidate set is fetched at ``max(limit, scan_limit)`` and cut to
        ``limit`` after sorting, since tied zero scores come back in index order.
        """
        records = await self.search_similar(
            zero_vector(self.dimension), max(limit, self.scan_limit)
        )
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records[:limit]

    async def search_by_session(self, session_id: str) -> list[MemoryRecord]:
        """Records of one session found in the bounded candidate set."""
        return [record for _, record in await self._scan() if record.session_id == session_id]

    async def get_topic_context(self, topic: str, limit: int = 10) -> list[MemoryRecord]:
        """Records tagged with ``topic``, most important first."""
        tagged = [record for _, record in await self._scan() if topic in record.topic_tags]
        tagged.sort(key=lambda r: r.importance, reverse=True)
        return tagged[:limit]

    async def cleanup_old(self, retention_days: int = 30) -> int:
        """
        Delete records older than the retention window.

        Only the bounded candidate set is examined, so very large collections
        may need several passes.

        Returns:
            Number of deleted records
        """
        cutoff = self._clock() - timedelta(days=retention_days)
        expired = [point_id for point_id, record in await self._scan() if record.timestamp < cutoff]

        if expired:
            await self.index.delete(self.collection_name, expired)

        logger.info(
            f"Retention cleanup removed {len(expired)} memories",
            extra={"retention_days": retention_days, "cutoff": cutoff.isoformat()},
        )
        return len(expired)

    # ═══════════════════════════════════════════════════════════
    # TAGGING & SUMMARIES
    # ═══════════════════════════════════════════════════════════

    async def analyze_and_tag(self, text: str, llm: LLMProvider) -> tuple[list[str], float]:
        """
        Ask the completion backend for topic tags and an importance score.

        A reply that is not ``tags|importance`` yields ``([], 1.0)``.

        Raises:
            LLMError: If the completion call fails
        """
        response = await llm.complete(TAG_PROMPT.format(text=text))
        parts = response.split("|")
        if len(parts) != 2:
            return [], 1.0

        tags = [tag.strip() for tag in parts[0].split(",") if tag.strip()]
        try:
            importance = float(parts[1].strip())
        except ValueError:
            importance = 1.0

        return tags, clamp_importance(importance)

    @staticmethod
    def summarize_memories(records: list[MemoryRecord]) -> str:
        """Render records as timestamped ``role: text`` lines."""
        return "".join(
            f"[{r.timestamp.strftime('%Y-%m-%d %H:%M:%S')}] {r.role}: {r.text}\n" for r in records
        )

    async def get_session_summary(self, session_id: str, llm: LLMProvider) -> str:
        records = await self.search_by_session(session_id)
        if not records:
            return NO_SESSION_SUMMARY

        conversation = "\n".join(record.render() for record in records)
        return await llm.complete(SUMMARY_PROMPT.format(conversation=conversation))

    async def update_session_summary(self, llm: LLMProvider) -> None:
        """Summarize the current session and store the summary on it."""
        session = self.session_manager.current
        if session is None:
            return

        summary = await self.get_session_summary(session.id, llm)
        self.session_manager.set_summary(summary, session_id=session.id)

    # ═══════════════════════════════════════════════════════════
    # PAYLOAD CONVERSION
    # ═══════════════════════════════════════════════════════════

    async def _scan(self) -> list[tuple[str, MemoryRecord]]:
        hits = await self.index.search(
            self.collection_name, zero_vector(self.dimension), self.scan_limit
        )
        return self._decode_hits(hits)

    def _decode_hits(self, hits: list[SearchHit]) -> list[tuple[str, MemoryRecord]]:
        decoded = []
        for hit in hits:
            record = self._from_payload(hit.payload)
            if record is None:
                logger.debug(f"Dropping undecodable memory payload {hit.id}")
                continue
            decoded.append((hit.id, record))
        return decoded

    @staticmethod
    def _to_payload(record: MemoryRecord) -> dict[str, Any]:
        payload = {
            "text": record.text,
            "timestamp": record.timestamp.isoformat(),
            "role": record.role,
            "session_id": record.session_id,
            "importance": record.importance,
            "topic_tags": sorted(record.topic_tags),
        }
        if record.metadata is not None:
            payload["metadata"] = record.metadata
        return payload

    @staticmethod
    def _from_payload(payload: dict[str, Any]) -> MemoryRecord | None:
        text = payload.get("text")
        timestamp = payload.get("timestamp")
        role = payload.get("role")
        if not isinstance(text, str) or not isinstance(timestamp, str) or not isinstance(role, str):
            return None

        try:
            return MemoryRecord(
                text=text,
                timestamp=datetime.fromisoformat(timestamp),
                role=role,
                session_id=payload.get("session_id") or "default",
                importance=payload.get("importance", 1.0),
                topic_tags=frozenset(payload.get("topic_tags") or ()),
                metadata=payload.get("metadata"),
            )
        except (ValueError, TypeError, PydanticValidationError):
            return None
