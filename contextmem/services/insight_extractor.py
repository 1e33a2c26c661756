"""
Document insight extraction pipeline.

Documents are chunked into page-aware word windows. For every chunk the
completion backend extracts insights, then the chunk text and each insight's
text are embedded. Embedded chunks are written to the ``document_chunks``
collection and embedded insights to the ``document_insights`` collection, one
batch each. Processed chunks are cached so re-processing the same document
does not call any backend again.

Failure policy:
- completion failure: logged, the chunk yields no insights and is not cached
- chunk embedding failure: logged, insights are kept but the chunk is not indexed
- insight embedding failure: logged, that insight keeps no vector and is not indexed
- batch upsert failure: logged and swallowed
"""

from collections import defaultdict
from typing import Any

from contextmem.core.cache.embedding_cache import EmbeddingCache
from contextmem.core.chunking.chunker import DocumentChunker
from contextmem.core.embeddings.base import Embedder
from contextmem.core.llm.base import LLMProvider
from contextmem.core.vector_store.base import SearchHit, VectorIndex
from contextmem.models.document import (
    DocumentChunk,
    DocumentSearchResult,
    Insight,
    ProcessedChunk,
)
from contextmem.services.insight_parser import DEFAULT_RELEVANCE, parse_insights
from contextmem.utils.concurrency import bounded_gather
from contextmem.utils.exceptions import (
    DimensionError,
    LLMError,
    ProviderError,
    ValidationError,
    VectorStoreError,
)
from contextmem.utils.logger import get_logger
from contextmem.utils.vectors import zero_vector

logger = get_logger(__name__)

# Maximum chunk workers (and so backend calls) in flight during one process() run
EMBEDDING_CONCURRENCY = 20

INSIGHT_PROMPT = """Extract key insights from the following text and format them as a JSON array.

Each insight must be an object with exactly these fields:
"text": (string) The insight text
"relevance": (number) Importance score between 0 and 1

Example format:
[
  {{"text": "First key insight here", "relevance": 0.95}},
  {{"text": "Second key insight here", "relevance": 0.85}}
]

Text to analyze:
{text}

Respond ONLY with the JSON array. Do not add any explanations or additional text."""

QUICK_ANALYSIS_PROMPT = (
    "Please analyze this text and provide the key insights in a clear, concise way:\n\n{text}"
)

PAGE_SUMMARY_PROMPT = "Summarize this text from page {page} concisely:\n\n{text}"


class InsightExtractor:
    """
    Chunk, extract, embed, index and cache.

    Each missed chunk is handled by one worker that runs its completion and
    embedding calls in turn, so at most ``EMBEDDING_CONCURRENCY`` backend
    calls are in flight. Results are associated with chunks by position.
    """

    def __init__(
        self,
        llm: LLMProvider,
        embedder: Embedder,
        index: VectorIndex,
        cache: EmbeddingCache | None = None,
        chunker: DocumentChunker | None = None,
        collection_name: str = "document_chunks",
        insight_collection_name: str = "document_insights",
        dimension: int = 1536,
        fallback_relevance: float = DEFAULT_RELEVANCE,
        scan_limit: int = 100,
    ):
        """
        Initialize InsightExtractor.

        Args:
            llm: Completion backend used for insight extraction and summaries
            embedder: Embedding backend for chunk, insight and query vectors
            index: Vector index holding the chunk and insight collections
            cache: Processed-chunk cache (capacity 100 when not given)
            chunker: Document chunker (1000-word windows when not given)
            collection_name: Collection for chunk vectors
            insight_collection_name: Collection for insight vectors
            dimension: Required embedding length
            fallback_relevance: Relevance of line-fallback insights
            scan_limit: Chunks fetched when summarizing a document
        """
        self.llm = llm
        self.embedder = embedder
        self.index = index
        self.cache = cache or EmbeddingCache()
        self.chunker = chunker or DocumentChunker()
        self.collection_name = collection_name
        self.insight_collection_name = insight_collection_name
        self.dimension = dimension
        self.fallback_relevance = fallback_relevance
        self.scan_limit = scan_limit

    async def initialize(self) -> None:
        """Create the chunk and insight collections if they do not exist."""
        await self.index.create_collection(self.collection_name, self.dimension)
        await self.index.create_collection(self.insight_collection_name, self.dimension)

    # ═══════════════════════════════════════════════════════════
    # EXTRACTION
    # ═══════════════════════════════════════════════════════════

    async def extract_insights(
        self, text: str, metadata: dict[str, Any] | None = None
    ) -> list[Insight]:
        """
        Extract insights from a single text without chunking.

        Each insight's text is embedded and the embedded insights are indexed
        in the insight collection.

        Raises:
            LLMError: If the completion call fails
        """
        insights = await self._complete_insights(text, metadata)
        embedded = await bounded_gather(self._embed_insight, insights, EMBEDDING_CONCURRENCY)
        await self._store_insights(embedded)
        return embedded

    async def quick_analyze(self, text: str) -> str:
        """Free-form analysis, no JSON."""
        return await self.llm.complete(QUICK_ANALYSIS_PROMPT.format(text=text))

    async def process(
        self,
        text: str,
        metadata: dict[str, Any] | None = None,
        document_id: str | None = None,
    ) -> list[Insight]:
        """
        Run the full document pipeline.

        Cache entries are keyed by page and chunk position. Pass
        ``document_id`` when processing more than one document, otherwise a
        chunk at the same position in another document is served from cache.

        Args:
            text: Document text (pages separated by the page marker)
            metadata: Caller metadata merged into every insight's metadata
            document_id: Optional namespace for cache keys and chunk payloads

        Returns:
            Insights of all chunks, in chunk order
        """
        chunks = self.chunker.chunk(text)

        cached: dict[int, ProcessedChunk] = {}
        misses: list[DocumentChunk] = []
        for chunk in chunks:
            entry = self.cache.get(
                EmbeddingCache.key_for(chunk.page_number, chunk.chunk_index, document_id)
            )
            if entry is not None:
                cached[chunk.chunk_index] = entry
            else:
                misses.append(chunk)

        logger.info(
            f"Processing document: {len(chunks)} chunks, {len(cached)} cached",
            extra={"chunks": len(chunks), "cache_hits": len(cached), "document": document_id},
        )

        results = await bounded_gather(
            lambda chunk: self._process_chunk(chunk, metadata), misses, EMBEDDING_CONCURRENCY
        )
        processed = {entry.chunk.chunk_index: entry for entry in results if entry is not None}

        entries = list(processed.values())
        await self._store_chunks(entries, document_id)
        await self._store_insights([insight for entry in entries for insight in entry.insights])

        for entry in entries:
            self.cache.put(
                EmbeddingCache.key_for(
                    entry.chunk.page_number, entry.chunk.chunk_index, document_id
                ),
                entry,
            )

        insights = []
        for chunk in chunks:
            entry = cached.get(chunk.chunk_index) or processed.get(chunk.chunk_index)
            if entry is not None:
                insights.extend(entry.insights)
        return insights

    async def _process_chunk(
        self, chunk: DocumentChunk, metadata: dict[str, Any] | None
    ) -> ProcessedChunk | None:
        provenance = {"page": chunk.page_number, "chunk": chunk.chunk_index, **(metadata or {})}
        try:
            insights = await self._complete_insights(chunk.text, provenance)
        except LLMError as e:
            logger.warning(
                f"Insight extraction failed for chunk {chunk.chunk_index}: {e}",
                extra={"page": chunk.page_number, "chunk": chunk.chunk_index},
            )
            return None

        embedding = await self._embed_or_none(
            chunk.text, {"page": chunk.page_number, "chunk": chunk.chunk_index}
        )
        insights = [await self._embed_insight(insight) for insight in insights]
        return ProcessedChunk(chunk=chunk, embedding=embedding, insights=insights)

    async def _complete_insights(
        self, text: str, metadata: dict[str, Any] | None
    ) -> list[Insight]:
        response = await self.llm.complete(INSIGHT_PROMPT.format(text=text))
        insights = parse_insights(response, self.fallback_relevance)
        if metadata is None:
            return insights
        return [insight.model_copy(update={"metadata": dict(metadata)}) for insight in insights]

    async def _embed_insight(self, insight: Insight) -> Insight:
        embedding = await self._embed_or_none(insight.text, insight.metadata or {})
        return insight.model_copy(update={"embedding": embedding})

    async def _embed_or_none(self, text: str, extra: dict[str, Any]) -> list[float] | None:
        try:
            return await self.embedder.embed_checked(text, self.dimension)
        except (ProviderError, DimensionError, ValidationError) as e:
            logger.warning(f"Embedding failed: {e}", extra=extra)
            return None

    async def _store_chunks(self, entries: list[ProcessedChunk], document_id: str | None) -> None:
        points = []
        for entry in entries:
            if entry.embedding is None:
                continue
            payload = {
                "text": entry.chunk.text,
                "page": entry.chunk.page_number,
                "chunk": entry.chunk.chunk_index,
            }
            if document_id:
                payload["document"] = document_id
            points.append((entry.embedding, payload))

        await self._upsert(self.collection_name, points)

    async def _store_insights(self, insights: list[Insight]) -> None:
        points = []
        for insight in insights:
            if insight.embedding is None:
                continue
            payload = {"text": insight.text, "relevance": insight.relevance}
            if insight.metadata is not None:
                payload["metadata"] = insight.metadata
            points.append((insight.embedding, payload))

        await self._upsert(self.insight_collection_name, points)

    async def _upsert(self, collection: str, points: list[tuple[list[float], dict]]) -> None:
        if not points:
            return

        try:
            await self.index.upsert_batch(collection, points)
        except VectorStoreError as e:
            logger.warning(
                f"Failed to store vectors in batch: {e}",
                extra={"collection": collection, "points": len(points)},
            )

    # ═══════════════════════════════════════════════════════════
    # RETRIEVAL
    # ═══════════════════════════════════════════════════════════

    async def search(self, query_text: str, limit: int = 10) -> list[tuple[str, float]]:
        """Raw (chunk text, score) pairs for a query, in index ranking order."""
        hits = await self._query(self.collection_name, query_text, limit)
        return self._text_pairs(hits)

    async def search_insights(self, query_text: str, limit: int = 10) -> list[tuple[str, float]]:
        """Raw (insight text, score) pairs from the insight collection."""
        hits = await self._query(self.insight_collection_name, query_text, limit)
        return self._text_pairs(hits)

    async def search_document(self, query: str, limit: int = 10) -> list[DocumentSearchResult]:
        """Chunk hits with page provenance; context comes from the cache when available."""
        results = []
        for hit in await self._query(self.collection_name, query, limit):
            text = hit.payload.get("text") or ""
            page = int(hit.payload.get("page") or 0)
            chunk_index = int(hit.payload.get("chunk") or 0)

            cached = self.cache.get(
                EmbeddingCache.key_for(page, chunk_index, hit.payload.get("document"))
            )
            results.append(
                DocumentSearchResult(
                    text=text,
                    context=cached.chunk.text if cached else text,
                    score=hit.score,
                    page_number=page,
                    chunk_index=chunk_index,
                )
            )
        return results

    async def get_document_summary(self, page_range: tuple[int, int] | None = None) -> str:
        """
        Summarize stored chunks page by page.

        Args:
            page_range: Optional inclusive (first, last) page range

        Returns:
            ``"\\nPage {n}: {summary}\\n"`` blocks in page order; pages whose
            summary fails are skipped
        """
        hits = await self.index.search(
            self.collection_name, zero_vector(self.dimension), self.scan_limit
        )

        pages: dict[int, list[str]] = defaultdict(list)
        for hit in hits:
            text, page = hit.payload.get("text"), hit.payload.get("page")
            if not isinstance(text, str) or not isinstance(page, int):
                continue
            if page_range and not page_range[0] <= page <= page_range[1]:
                continue
            pages[page].append(text)

        summary = ""
        for page in sorted(pages):
            prompt = PAGE_SUMMARY_PROMPT.format(page=page, text=" ".join(pages[page]))
            try:
                page_summary = await self.llm.complete(prompt)
            except LLMError as e:
                logger.warning(f"Summary failed for page {page}: {e}", extra={"page": page})
                continue
            summary += f"\nPage {page}: {page_summary}\n"
        return summary

    async def _query(self, collection: str, query_text: str, limit: int) -> list[SearchHit]:
        embedding = await self.embedder.embed_checked(query_text, self.dimension)
        return await self.index.search(collection, embedding, limit)

    @staticmethod
    def _text_pairs(hits: list[SearchHit]) -> list[tuple[str, float]]:
        return [
            (hit.payload["text"], hit.score)
            for hit in hits
            if isinstance(hit.payload.get("text"), str)
        ]
