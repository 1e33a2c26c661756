"""
Document chunk and insight models for the document ingestion pipeline.

Documents are split into page-aware word windows (chunks). Each chunk is sent
to the completion backend for insight extraction and embedded for retrieval.
"""

from typing import Any

from pydantic import BaseModel, Field


class DocumentChunk(BaseModel):
    """
    Bounded-size contiguous slice of a document.

    ``chunk_index`` increases monotonically across the whole document,
    not per page.
    """

    text: str = Field(..., description="Chunk text (words joined by single spaces)")
    page_number: int = Field(..., ge=1, description="1-based page number")
    chunk_index: int = Field(..., ge=0, description="0-based index within the document")
    metadata: dict[str, Any] | None = Field(default=None, description="Optional metadata")

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def word_count(self) -> int:
        return len(self.text.split())


class Insight(BaseModel):
    """
    A key point extracted from a chunk of text.

    Relevance is whatever scale the completion backend answered with; the
    extractor does not clamp it.
    """

    text: str = Field(..., description="Insight text")
    relevance: float = Field(..., description="Relevance score as reported by the model")
    embedding: list[float] | None = Field(default=None, description="Embedding of the insight text")
    metadata: dict[str, Any] | None = Field(
        default=None, description="Provenance (page, chunk) and caller metadata"
    )

    def __str__(self) -> str:
        return f"Insight: {self.text} (Relevance: {self.relevance:.2f})"


class ProcessedChunk(BaseModel):
    """Cache entry for a fully processed chunk."""

    chunk: DocumentChunk
    embedding: list[float] | None = None
    insights: list[Insight] = Field(default_factory=list)


class DocumentSearchResult(BaseModel):
    """Document chunk search hit, with cached context when available."""

    text: str
    context: str
    score: float
    page_number: int
    chunk_index: int
