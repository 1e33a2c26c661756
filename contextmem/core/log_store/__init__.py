"""Relational conversation/insight log."""

from contextmem.core.log_store.conversation_log import ConversationLog

__all__ = ["ConversationLog"]
