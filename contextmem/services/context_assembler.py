"""
Prompt context assembly from conversational memory.
"""

from contextmem.core.memory_store.memory_store import MemoryStore
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)

RECENT_HEADER = "Recent Conversation:\n"
RELEVANT_HEADER = "\nRelevant Past Messages:\n"
TRUNCATED_RELEVANT = "\nRelevant Past Messages: [Truncated for length]"


class ContextAssembler:
    """
    Build the context block for the next prompt.

    The block has a recent section (oldest to newest) and a relevant section
    of similar past turns not already in the recent section. When the block
    exceeds the character budget the relevant section is replaced by a
    placeholder; the recent section is never cut.
    """

    def __init__(
        self,
        memory_store: MemoryStore,
        max_context_chars: int = 4000,
        recent_limit: int = 5,
        similar_limit: int = 10,
    ):
        self.memory_store = memory_store
        self.max_context_chars = max_context_chars
        self.recent_limit = recent_limit
        self.similar_limit = similar_limit

    async def build(self, user_message: str, user_embedding: list[float]) -> str:
        """
        Assemble context for ``user_message``.

        Args:
            user_message: Current user message
            user_embedding: Embedding of the message, used for the similarity lookup

        Returns:
            Rendered context (sections are present even when empty)
        """
        recent = await self.memory_store.get_recent(self.recent_limit)
        similar = await self.memory_store.search_similar(user_embedding, self.similar_limit)

        recent_texts = {record.text for record in recent}
        recent_part = RECENT_HEADER + "".join(f"{r.render()}\n" for r in reversed(recent))
        relevant_part = RELEVANT_HEADER + "".join(
            f"[Previous] {r.render()}\n" for r in similar if r.text not in recent_texts
        )

        context = recent_part + relevant_part
        if len(context) > self.max_context_chars:
            logger.debug(
                "Context over budget, dropping relevant section",
                extra={"length": len(context), "budget": self.max_context_chars},
            )
            context = recent_part + TRUNCATED_RELEVANT

        return context
