"""
ContextMem FastAPI Application

A REST API server for the ContextMem engine.
Provides endpoints for chatting, storing and searching memories, and
ingesting and searching documents.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from contextmem.config import Config
from contextmem.models.personality import PersonalityProfile
from contextmem.services.engine import ContextMemEngine
from contextmem.utils.exceptions import (
    ConfigurationError,
    DimensionError,
    ProviderError,
    ValidationError,
)
from contextmem.utils.logger import get_logger, setup_logging_from_config

# Global engine instance
engine: ContextMemEngine | None = None
logger = get_logger(__name__)


# Pydantic models for API
class ChatRequest(BaseModel):
    """Request model for a chat turn."""

    message: str = Field(..., min_length=1, description="User message")


class ChatResponse(BaseModel):
    """Response model for a chat turn."""

    response: str
    session_id: str


class StartSessionRequest(BaseModel):
    """Request model for starting a session."""

    topic: str | None = Field(default=None, description="Session topic")


class SessionResponse(BaseModel):
    """Current session state."""

    session_id: str
    topic: str
    summary: str
    start_time: str
    last_active: str


class AddMemoryRequest(BaseModel):
    """Request model for storing a memory."""

    text: str = Field(..., min_length=1, description="Memory text")
    role: str = Field(default="user", description="Speaker or source role")
    metadata: dict[str, Any] | None = Field(default=None, description="Optional metadata")
    analyze: bool = Field(default=False, description="Tag and rate importance with the LLM")


class AddMemoryResponse(BaseModel):
    """Response model for add memory."""

    memory_id: str


class SearchMemoriesRequest(BaseModel):
    """Request model for memory similarity search."""

    query: str = Field(..., min_length=1, description="Search query")
    limit: int = Field(default=10, ge=1, le=100, description="Max results")


class MemoryResult(BaseModel):
    """Memory search result."""

    text: str
    role: str
    timestamp: str
    session_id: str
    importance: float
    topic_tags: list[str]
    metadata: dict[str, Any] | None = None


class AddDocumentRequest(BaseModel):
    """Request model for ingesting a document."""

    text: str = Field(..., min_length=1)
    document_path: str | None = None
    metadata: dict[str, Any] | None = None


class InsightResult(BaseModel):
    """Extracted insight."""

    text: str
    relevance: float
    metadata: dict[str, Any] | None = None


class SearchDocumentsRequest(BaseModel):
    """Request model for document search."""

    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=100)


class DocumentResult(BaseModel):
    """Document chunk hit."""

    text: str
    context: str
    score: float
    page_number: int
    chunk_index: int


class InsightHit(BaseModel):
    """Insight search hit."""

    text: str
    score: float


class IndexTextRequest(BaseModel):
    """Request model for indexing a text snippet."""

    text: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1, description="Source label (webpage, research, ...)")
    metadata: dict[str, Any] | None = None


class IndexTextResponse(BaseModel):
    """Response model for indexed text."""

    id: str


class SearchTextRequest(BaseModel):
    """Request model for semantic text search."""

    query: str = Field(..., min_length=1)
    limit: int = Field(default=5, ge=1, le=100)
    source: str | None = Field(default=None, description="Only return hits from this source")


class TextResult(BaseModel):
    """Semantic search hit."""

    text: str
    score: float
    source: str
    metadata: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    engine_initialized: bool
    vector_backend: str
    model: str


def _raise_http(action: str, e: Exception) -> None:
    logger.error(f"Error {action}: {e}")
    if isinstance(e, (ValidationError, DimensionError)):
        raise HTTPException(status_code=400, detail=str(e)) from e
    if isinstance(e, ProviderError):
        raise HTTPException(status_code=502, detail=str(e)) from e
    raise HTTPException(status_code=500, detail=str(e)) from e


def _require_engine() -> ContextMemEngine:
    if not engine:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global engine

    # Load configuration from environment or use defaults
    config = Config.from_env()

    # Initialize logging with config
    setup_logging_from_config(config.logging)

    logger.info("Starting ContextMem server")
    logger.info(
        f"Configuration: LLM={config.llm.provider}/{config.llm.model}, "
        f"Embedder={config.embedder.provider}/{config.embedder.model}, "
        f"Vector={config.vector_backend}"
    )

    personality = None
    if config.personality_path:
        personality = PersonalityProfile.from_file(config.personality_path)
        logger.info(f"Loaded personality {personality}")

    engine = ContextMemEngine.from_config(config, personality=personality)
    await engine.initialize()
    logger.info("ContextMem engine initialized")

    yield

    # Cleanup
    logger.info("Shutting down ContextMem server")
    await engine.close()
    engine = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="ContextMem API",
    description="Retrieval-augmented conversational memory and document insights",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if engine else "initializing",
        engine_initialized=engine is not None,
        vector_backend=engine.config.vector_backend if engine else "",
        model=engine.backend.describe() if engine else "",
    )


# Conversation endpoints
@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """Answer a message using recent and relevant conversation memory as context."""
    current = _require_engine()

    try:
        response = await current.chat(request.message)
        return ChatResponse(
            response=response, session_id=current.session_manager.current_session_id()
        )
    except Exception as e:
        _raise_http("chatting", e)


@app.post("/sessions", response_model=SessionResponse)
async def start_session(request: StartSessionRequest):
    """Start a new conversation session."""
    current = _require_engine()
    current.start_conversation(request.topic)
    return _session_response(current)


@app.get("/sessions/current", response_model=SessionResponse)
async def get_session(summarize: bool = Query(default=False)):
    """Current session, optionally refreshing its summary first."""
    current = _require_engine()
    if current.session_manager.current is None:
        raise HTTPException(status_code=404, detail="No active session")

    if summarize:
        try:
            await current.memory_store.update_session_summary(current.backend.llm)
        except Exception as e:
            _raise_http("summarizing session", e)
    return _session_response(current)


def _session_response(current: ContextMemEngine) -> SessionResponse:
    session = current.session_manager.current
    return SessionResponse(
        session_id=session.id,
        topic=session.topic,
        summary=session.summary,
        start_time=session.start_time.isoformat(),
        last_active=session.last_active.isoformat(),
    )


# Memory endpoints
@app.post("/memories", response_model=AddMemoryResponse)
async def add_memory(request: AddMemoryRequest):
    """Embed and store a memory in the current session."""
    current = _require_engine()

    try:
        memory_id = await current.remember(
            request.text, request.role, request.metadata, analyze=request.analyze
        )
        return AddMemoryResponse(memory_id=memory_id)
    except Exception as e:
        _raise_http("adding memory", e)


@app.get("/memories", response_model=list[MemoryResult])
async def recent_memories(limit: int = Query(default=10, ge=1, le=100)):
    """Most recent memories, newest first."""
    current = _require_engine()

    try:
        return [_memory_result(r) for r in await current.memory_store.get_recent(limit)]
    except Exception as e:
        _raise_http("listing memories", e)


@app.post("/memories/search", response_model=list[MemoryResult])
async def search_memories(request: SearchMemoriesRequest):
    """Memories most similar to the query."""
    current = _require_engine()

    try:
        return [_memory_result(r) for r in await current.recall(request.query, request.limit)]
    except Exception as e:
        _raise_http("searching memories", e)


def _memory_result(record) -> MemoryResult:
    return MemoryResult(
        text=record.text,
        role=record.role,
        timestamp=record.timestamp.isoformat(),
        session_id=record.session_id,
        importance=record.importance,
        topic_tags=sorted(record.topic_tags),
        metadata=record.metadata,
    )


# Document endpoints
@app.post("/documents", response_model=list[InsightResult])
async def add_document(request: AddDocumentRequest):
    """
    Ingest a document.

    The document is chunked by page and word window, insights are extracted
    per chunk and chunk embeddings are indexed for search.
    """
    current = _require_engine()

    try:
        insights = await current.ingest_document(
            request.text, request.document_path, request.metadata
        )
        return [
            InsightResult(text=i.text, relevance=i.relevance, metadata=i.metadata)
            for i in insights
        ]
    except Exception as e:
        _raise_http("ingesting document", e)


@app.post("/documents/search", response_model=list[DocumentResult])
async def search_documents(request: SearchDocumentsRequest):
    """Document chunks most similar to the query."""
    current = _require_engine()

    try:
        results = await current.search_documents(request.query, request.limit)
        return [DocumentResult(**r.model_dump()) for r in results]
    except Exception as e:
        _raise_http("searching documents", e)


@app.post("/documents/insights/search", response_model=list[InsightHit])
async def search_insights(request: SearchDocumentsRequest):
    """Extracted insights most similar to the query."""
    current = _require_engine()

    try:
        results = await current.search_insights(request.query, request.limit)
        return [InsightHit(text=text, score=score) for text, score in results]
    except Exception as e:
        _raise_http("searching insights", e)


@app.get("/documents/summary")
async def document_summary(
    first_page: int | None = Query(default=None, ge=1),
    last_page: int | None = Query(default=None, ge=1),
):
    """Page-by-page summary of stored document chunks."""
    current = _require_engine()

    page_range = None
    if first_page is not None or last_page is not None:
        page_range = (first_page or 1, last_page or first_page)

    try:
        return {"summary": await current.insights.get_document_summary(page_range)}
    except Exception as e:
        _raise_http("summarizing document", e)


# Semantic search endpoints
@app.post("/texts", response_model=IndexTextResponse)
async def index_text(request: IndexTextRequest):
    """Index a text snippet under a source label."""
    current = _require_engine()

    try:
        point_id = await current.index_text(request.text, request.source, request.metadata)
        return IndexTextResponse(id=point_id)
    except Exception as e:
        _raise_http("indexing text", e)


@app.post("/texts/search", response_model=list[TextResult])
async def search_texts(request: SearchTextRequest):
    """Indexed snippets most similar to the query, optionally from one source."""
    current = _require_engine()

    try:
        results = await current.search_text(request.query, request.limit, request.source)
        return [TextResult(**r.model_dump()) for r in results]
    except Exception as e:
        _raise_http("searching texts", e)


# Maintenance endpoints
@app.post("/topics")
async def generate_topic():
    """Generate a topic not used in the last day."""
    current = _require_engine()

    try:
        return {"topic": await current.generate_topic()}
    except ConfigurationError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except Exception as e:
        _raise_http("generating topic", e)


@app.post("/memories/cleanup")
async def cleanup_memories():
    """Delete memories older than the retention window."""
    current = _require_engine()

    try:
        return {"deleted": await current.cleanup()}
    except Exception as e:
        _raise_http("cleaning up memories", e)
