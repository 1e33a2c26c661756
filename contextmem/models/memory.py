"""
Conversational memory models: stored turns and conversation sessions.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from contextmem.utils.id_generator import generate_session_id


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def clamp_importance(value: float) -> float:
    """Clamp into [0.0, 1.0]; NaN and infinities fall back to 1.0."""
    if not math.isfinite(value):
        return 1.0
    return min(max(value, 0.0), 1.0)


class MemoryRole(str, Enum):
    """
    Well-known memory roles.

    The role vocabulary is open: any non-empty string is accepted on a
    MemoryRecord, these are just the values the engine itself writes.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    CHAT = "chat"
    WEBPAGE = "webpage"
    RESEARCH = "research"
    ANALYSIS = "analysis"


class MemoryRecord(BaseModel):
    """
    One stored conversational turn.

    Records are immutable once created. They are written by MemoryStore and
    only ever removed by retention cleanup.
    """

    text: str = Field(..., min_length=1, description="Turn text")
    timestamp: datetime = Field(default_factory=utc_now, description="Creation time (UTC)")
    role: str = Field(..., min_length=1, description="Speaker or source role")
    session_id: str = Field(default="default", description="Owning conversation session")
    importance: float = Field(default=1.0, description="Importance in [0.0, 1.0]")
    topic_tags: frozenset[str] = Field(default_factory=frozenset, description="Topic tags")
    metadata: dict[str, Any] | None = Field(default=None, description="Optional metadata")

    class Config:
        """Pydantic configuration."""

        frozen = True

    @field_validator("role", mode="before")
    @classmethod
    def _role_value(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value

    @field_validator("importance", mode="before")
    @classmethod
    def _clamp_importance(cls, value: Any) -> float:
        return clamp_importance(float(value))

    @field_validator("timestamp")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def render(self) -> str:
        """Render as a ``role: text`` line."""
        return f"{self.role}: {self.text}"


class ConversationSession(BaseModel):
    """
    A bounded-duration grouping of conversational turns.

    Sessions are superseded when their continuation window lapses, never deleted.
    """

    id: str = Field(default_factory=generate_session_id, description="Unique session ID")
    start_time: datetime = Field(default_factory=utc_now, description="Session start")
    topic: str = Field(default="General Conversation", description="Session topic")
    summary: str = Field(default="", description="Lazily generated summary")
    last_active: datetime = Field(default_factory=utc_now, description="Last touch time")

    def touch(self, now: datetime) -> None:
        """Refresh the last-activity timestamp."""
        self.last_active = now

    def idle_for(self, now: datetime) -> float:
        """Seconds elapsed since the last touch."""
        return (now - self.last_active).total_seconds()
