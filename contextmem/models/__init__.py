"""
Data models for contextmem.

Core models:
- MemoryRecord, ConversationSession, MemoryRole: conversational memory
- DocumentChunk, Insight, ProcessedChunk, DocumentSearchResult: document pipeline
- SearchResult: semantic search hits
- LogEntry, ConversationTurn, DocumentInsightRow: relational log rows
- PersonalityProfile: validated agent personality
"""

from contextmem.models.document import (
    DocumentChunk,
    DocumentSearchResult,
    Insight,
    ProcessedChunk,
)
from contextmem.models.log import ConversationTurn, DocumentInsightRow, LogEntry
from contextmem.models.memory import ConversationSession, MemoryRecord, MemoryRole, utc_now
from contextmem.models.personality import PersonalityProfile
from contextmem.models.search import SearchResult

__all__ = [
    # Memory models
    "MemoryRecord",
    "MemoryRole",
    "ConversationSession",
    "utc_now",
    # Document models
    "DocumentChunk",
    "Insight",
    "ProcessedChunk",
    "DocumentSearchResult",
    # Search
    "SearchResult",
    # Log rows
    "LogEntry",
    "ConversationTurn",
    "DocumentInsightRow",
    # Personality
    "PersonalityProfile",
]
