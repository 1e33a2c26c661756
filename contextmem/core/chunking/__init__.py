"""Document chunking."""

from contextmem.core.chunking.chunker import PAGE_MARKER, DocumentChunker

__all__ = ["DocumentChunker", "PAGE_MARKER"]
