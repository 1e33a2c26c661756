"""
Semantic search result model.
"""

from typing import Any

from pydantic import BaseModel


class SearchResult(BaseModel):
    """Indexed text hit from the semantic search collection."""

    text: str
    score: float
    source: str
    metadata: dict[str, Any] | None = None
