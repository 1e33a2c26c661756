"""
ContextMem engine - wires configuration, backends and services together.

Brings together:
- LLM & Embedder backends (ActiveBackend)
- Vector index collections for memory, documents and semantic search
- Session tracking, context assembly and chat
- Document insight extraction
- Relational conversation log
"""

from typing import Any

from contextmem.config import Config
from contextmem.core.cache.embedding_cache import EmbeddingCache
from contextmem.core.chunking.chunker import DocumentChunker
from contextmem.core.factory.backend import ActiveBackend
from contextmem.core.factory.vector_factory import VectorIndexFactory
from contextmem.core.log_store.conversation_log import ConversationLog
from contextmem.core.memory_store.memory_store import MemoryStore
from contextmem.core.session.session_manager import SessionManager
from contextmem.core.vector_store.base import VectorIndex
from contextmem.models.document import DocumentSearchResult, Insight
from contextmem.models.personality import PersonalityProfile
from contextmem.models.search import SearchResult
from contextmem.services.chat_manager import ChatManager
from contextmem.services.context_assembler import ContextAssembler
from contextmem.services.insight_extractor import InsightExtractor
from contextmem.services.semantic_search import SemanticSearch
from contextmem.services.topic_generator import TopicGenerator, TopicHistory
from contextmem.utils.exceptions import ConfigurationError
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


class ContextMemEngine:
    """
    Facade over all contextmem components.

    Build with ``from_config`` for real backends, or pass handles directly
    (tests, embedding in another application).
    """

    def __init__(
        self,
        config: Config,
        backend: ActiveBackend,
        index: VectorIndex,
        conversation_log: ConversationLog | None = None,
        personality: PersonalityProfile | None = None,
    ):
        """
        Initialize ContextMem engine.

        Args:
            config: Configuration object
            backend: Active completion/embedding backend
            index: Vector index shared by all collections
            conversation_log: Optional relational log
            personality: Optional personality; its system prompt replaces the configured one
        """
        self.config = config
        self.backend = backend
        self.index = index
        self.conversation_log = conversation_log
        self.personality = personality

        if personality is not None:
            backend.update_system_prompt(personality.system_prompt())

        dimension = config.embedder.dimension
        memory = config.memory

        self.session_manager = SessionManager(
            window_minutes=memory.session_window_minutes,
            default_topic=memory.default_topic,
        )
        self.memory_store = MemoryStore(
            index=index,
            session_manager=self.session_manager,
            collection_name=memory.collection_name,
            dimension=dimension,
            scan_limit=memory.scan_limit,
        )
        self.assembler = ContextAssembler(
            memory_store=self.memory_store,
            max_context_chars=memory.max_context_chars,
            recent_limit=memory.recent_limit,
            similar_limit=memory.similar_limit,
        )
        self.chat_manager = ChatManager(
            llm=backend.llm,
            embedder=backend.embedder,
            memory_store=self.memory_store,
            session_manager=self.session_manager,
            assembler=self.assembler,
            conversation_log=conversation_log,
            personality=personality.name if personality else "default",
        )
        self.insights = InsightExtractor(
            llm=backend.llm,
            embedder=backend.embedder,
            index=index,
            cache=EmbeddingCache(config.documents.cache_capacity),
            chunker=DocumentChunker(
                chunk_size_words=config.documents.chunk_size_words,
                page_marker=config.documents.page_marker,
            ),
            collection_name=config.documents.collection_name,
            insight_collection_name=config.documents.insight_collection_name,
            dimension=dimension,
            fallback_relevance=config.documents.fallback_relevance,
            scan_limit=memory.scan_limit,
        )
        self.semantic_search = SemanticSearch(
            index=index,
            collection_name=memory.search_collection_name,
            dimension=dimension,
        )
        self.topic_history = TopicHistory()

    @classmethod
    def from_config(
        cls, config: Config, personality: PersonalityProfile | None = None
    ) -> "ContextMemEngine":
        """
        Create backends through the factories and build the engine.

        Raises:
            ConfigurationError: If a backend name or credential is invalid
        """
        backend = ActiveBackend.from_config(config)
        index = VectorIndexFactory.create(config.vector_backend, config.qdrant)
        conversation_log = (
            ConversationLog(config.log_store.db_path) if config.log_store.enabled else None
        )
        return cls(config, backend, index, conversation_log, personality)

    async def initialize(self) -> None:
        """Create vector collections and the log schema."""
        logger.info("Initializing ContextMem engine")

        await self.memory_store.initialize()
        await self.insights.initialize()
        await self.semantic_search.initialize()
        logger.info("Vector collections ready")

        if self.conversation_log is not None:
            await self.conversation_log.initialize()
            logger.info("Conversation log ready")

        logger.info(f"ContextMem engine ready ({self.backend.describe()})")

    # ═══════════════════════════════════════════════════════════
    # CONVERSATION
    # ═══════════════════════════════════════════════════════════

    def start_conversation(self, topic: str | None = None) -> str:
        return self.chat_manager.start_conversation(topic)

    async def chat(self, message: str) -> str:
        return await self.chat_manager.chat(message)

    async def remember(
        self,
        text: str,
        role: str,
        metadata: dict[str, Any] | None = None,
        analyze: bool = False,
    ) -> str:
        """
        Embed and store a memory outside the chat loop.

        With ``analyze`` the completion backend tags the text and rates its importance.
        """
        embedding = await self.backend.embedder.embed_checked(text, self.config.embedder.dimension)
        tags, importance = [], 1.0
        if analyze:
            tags, importance = await self.memory_store.analyze_and_tag(text, self.backend.llm)
        return await self.memory_store.store(
            text, role, embedding, metadata, importance=importance, topic_tags=set(tags)
        )

    async def recall(self, query: str, limit: int = 10):
        embedding = await self.backend.embedder.embed_checked(
            query, self.config.embedder.dimension
        )
        return await self.memory_store.search_similar(embedding, limit)

    async def generate_topic(self) -> str:
        if self.personality is None:
            raise ConfigurationError("Topic generation needs a personality profile")
        generator = TopicGenerator(self.backend.llm, self.topic_history, self.personality)
        return await generator.generate()

    async def cleanup(self) -> int:
        return await self.memory_store.cleanup_old(self.config.memory.retention_days)

    # ═══════════════════════════════════════════════════════════
    # DOCUMENTS & SEARCH
    # ═══════════════════════════════════════════════════════════

    async def ingest_document(
        self,
        text: str,
        document_path: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> list[Insight]:
        """
        Run the insight pipeline on a document.

        ``document_path`` namespaces the chunk cache. With a conversation log,
        insights are also persisted against that path.
        """
        insights = await self.insights.process(text, metadata, document_id=document_path)

        if document_path and self.conversation_log is not None:
            for insight in insights:
                await self.conversation_log.save_document_insight(
                    document_path, insight.text, insight.relevance, "document"
                )
        return insights

    async def search_documents(self, query: str, limit: int = 10) -> list[DocumentSearchResult]:
        return await self.insights.search_document(query, limit)

    async def search_insights(self, query: str, limit: int = 10) -> list[tuple[str, float]]:
        return await self.insights.search_insights(query, limit)

    async def index_text(
        self, text: str, source: str, metadata: dict[str, Any] | None = None
    ) -> str:
        embedding = await self.backend.embedder.embed_checked(text, self.config.embedder.dimension)
        return await self.semantic_search.index_text(text, source, embedding, metadata)

    async def search_text(
        self, query: str, limit: int = 5, source: str | None = None
    ) -> list[SearchResult]:
        embedding = await self.backend.embedder.embed_checked(
            query, self.config.embedder.dimension
        )
        if source:
            return await self.semantic_search.search_by_source(embedding, source, limit)
        return await self.semantic_search.search(embedding, limit)

    # LIFECYCLE MANAGEMENT

    async def close(self) -> None:
        """Close all connections."""
        logger.info("Shutting down ContextMem engine")

        await self.index.close()
        if self.conversation_log is not None:
            await self.conversation_log.close()
        await self.backend.close()

        logger.info("ContextMem engine shutdown complete")
