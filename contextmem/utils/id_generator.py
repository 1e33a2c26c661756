"""
ID generation utilities for contextmem.

- Sessions: full uuid4 string
- Vector points: full uuid4 string (Qdrant accepts uuids or integers only)
- Cache keys: page_N_chunk_M, optionally namespaced by document
"""

from uuid import uuid4


def generate_session_id() -> str:
    """
    Generate unique conversation session ID.

    Returns:
        Canonical uuid4 string
    """
    return str(uuid4())


def generate_point_id() -> str:
    """
    Generate unique vector point ID.

    Returns:
        Canonical uuid4 string
    """
    return str(uuid4())


def generate_chunk_key(page_number: int, chunk_index: int, document_id: str | None = None) -> str:
    """
    Build the cache key of a document chunk.

    Args:
        page_number: 1-based page number
        chunk_index: 0-based global chunk index
        document_id: Optional document namespace

    Returns:
        Key in format "page_N_chunk_M", prefixed with "{document_id}:" when given
    """
    key = f"page_{page_number}_chunk_{chunk_index}"
    return f"{document_id}:{key}" if document_id else key
