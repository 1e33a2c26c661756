"""
Row models for the relational conversation log.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class LogEntry(BaseModel):
    """Append-only audit row: who said what, tagged."""

    id: int | None = None
    timestamp: datetime
    actor: str
    content: str
    tag: str = ""


class ConversationTurn(BaseModel):
    """One user/assistant exchange as stored in the conversations table."""

    timestamp: datetime
    user_input: str
    ai_response: str
    personality: str


class DocumentInsightRow(BaseModel):
    """Insight persisted against a document path."""

    timestamp: datetime | None = None
    document_path: str
    insight_text: str
    relevance: float = Field(default=0.0)
    insight_type: str = ""
