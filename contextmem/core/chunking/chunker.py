"""
Page-aware word-window document chunker.
"""

from typing import Any

from contextmem.models.document import DocumentChunk
from contextmem.utils.exceptions import ValidationError

PAGE_MARKER = "\n\nPage "


class DocumentChunker:
    """
    Split documents into fixed-size word windows.

    The text is first split on the page marker into page segments numbered
    from 1. Each page is split on whitespace and grouped into windows of
    ``chunk_size_words`` words (the last window of a page may be shorter).
    ``chunk_index`` runs across the whole document. An empty page produces no
    chunk but still consumes a page number.
    """

    def __init__(self, chunk_size_words: int = 1000, page_marker: str = PAGE_MARKER):
        if chunk_size_words < 1:
            raise ValidationError(
                "chunk_size_words must be at least 1",
                context={"chunk_size_words": chunk_size_words},
            )
        self.chunk_size_words = chunk_size_words
        self.page_marker = page_marker

    def chunk(
        self,
        text: str,
        chunk_size_words: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> list[DocumentChunk]:
        """
        Chunk a document.

        Args:
            text: Full document text
            chunk_size_words: Window size override
            metadata: Metadata attached to every chunk

        Returns:
            Chunks in document order

        Raises:
            ValidationError: If the window size is below 1
        """
        size = self.chunk_size_words if chunk_size_words is None else chunk_size_words
        if size < 1:
            raise ValidationError(
                "chunk_size_words must be at least 1", context={"chunk_size_words": size}
            )

        chunks = []
        chunk_index = 0
        for page_number, page_text in enumerate(text.split(self.page_marker), start=1):
            words = page_text.split()
            for start in range(0, len(words), size):
                chunks.append(
                    DocumentChunk(
                        text=" ".join(words[start : start + size]),
                        page_number=page_number,
                        chunk_index=chunk_index,
                        metadata=metadata,
                    )
                )
                chunk_index += 1

        return chunks
