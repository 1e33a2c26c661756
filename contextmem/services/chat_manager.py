"""
Memory-grounded chat.

Each turn is embedded and stored, the context block is rebuilt from memory,
and the reply is stored as well. Exchanges are also appended to the
relational conversation log when one is configured.
"""

from contextmem.core.embeddings.base import Embedder
from contextmem.core.llm.base import LLMProvider
from contextmem.core.log_store.conversation_log import ConversationLog
from contextmem.core.memory_store.memory_store import MemoryStore
from contextmem.core.session.session_manager import SessionManager
from contextmem.models.memory import MemoryRole
from contextmem.services.context_assembler import ContextAssembler
from contextmem.utils.exceptions import LogStoreError
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)

CHAT_PROMPT = (
    "Conversation Context:\n{context}\n\n"
    "Current Session ID: {session_id}\n\n"
    "User: {message}\nAssistant:"
)


class ChatManager:
    """Conversation loop over MemoryStore, SessionManager and ContextAssembler."""

    def __init__(
        self,
        llm: LLMProvider,
        embedder: Embedder,
        memory_store: MemoryStore,
        session_manager: SessionManager,
        assembler: ContextAssembler,
        conversation_log: ConversationLog | None = None,
        personality: str = "default",
        summary_limit: int = 10,
    ):
        self.llm = llm
        self.embedder = embedder
        self.memory_store = memory_store
        self.session_manager = session_manager
        self.assembler = assembler
        self.conversation_log = conversation_log
        self.personality = personality
        self.summary_limit = summary_limit

    def start_conversation(self, topic: str | None = None) -> str:
        """Start a new session and return its id."""
        return self.session_manager.start_new_session(topic)

    async def chat(self, message: str) -> str:
        """
        Answer one user message.

        Raises:
            EmbeddingError: If embedding the message or reply fails
            DimensionError: If the embedder returns a vector of the wrong length
            LLMError: If the completion call fails
            VectorStoreError: If storing a turn fails
        """
        dimension = self.memory_store.dimension
        user_embedding = await self.embedder.embed_checked(message, dimension)

        session_id = self.session_manager.get_or_create()
        await self.memory_store.store(message, MemoryRole.USER, user_embedding)

        context = await self.assembler.build(message, user_embedding)
        response = await self.llm.complete(
            CHAT_PROMPT.format(context=context, session_id=session_id, message=message)
        )

        response_embedding = await self.embedder.embed_checked(response, dimension)
        await self.memory_store.store(response, MemoryRole.ASSISTANT, response_embedding)

        await self._log_exchange(session_id, message, response)
        return response

    async def get_conversation_summary(self) -> str:
        records = await self.memory_store.get_recent(self.summary_limit)
        return self.memory_store.summarize_memories(records)

    async def _log_exchange(self, session_id: str, message: str, response: str) -> None:
        if self.conversation_log is None:
            return

        # The reply is already stored in memory; a log failure must not lose it
        try:
            await self.conversation_log.append(MemoryRole.USER.value, message, tag=session_id)
            await self.conversation_log.append(MemoryRole.ASSISTANT.value, response, tag=session_id)
            await self.conversation_log.save_conversation(message, response, self.personality)
        except LogStoreError as e:
            logger.warning(
                f"Failed to log conversation: {e}", extra={"session_id": session_id}
            )
