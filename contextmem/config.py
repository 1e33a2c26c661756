"""
Configuration for contextmem.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "openai"  # ollama, openai
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    api_key: str | None = None
    system_prompt: str = "You are a helpful assistant."
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout: float = 120.0


class EmbedderConfig(BaseModel):
    """Embedder configuration."""

    provider: str = "openai"  # ollama, openai
    model: str = "text-embedding-3-small"
    base_url: str | None = None
    api_key: str | None = None
    timeout: float = 120.0
    # Every stored or queried vector must have exactly this length
    dimension: int = 1536


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class QdrantConfig(BaseModel):
    """Qdrant connection configuration."""

    url: str = "http://localhost:6333"
    use_grpc: bool = False
    timeout: int = 30


class MemoryConfig(BaseModel):
    """Conversational memory configuration."""

    collection_name: str = "conversation_memory"
    search_collection_name: str = "semantic_search"
    session_window_minutes: int = 30
    default_topic: str = "General Conversation"
    retention_days: int = 30
    max_context_chars: int = 4000
    recent_limit: int = 5
    similar_limit: int = 10
    # Candidate set size for zero-vector scans (session lookup, topic context, cleanup)
    scan_limit: int = 100


class DocumentConfig(BaseModel):
    """Document ingestion configuration."""

    collection_name: str = "document_chunks"
    insight_collection_name: str = "document_insights"
    chunk_size_words: int = 1000
    cache_capacity: int = 100
    page_marker: str = "\n\nPage "
    fallback_relevance: float = 0.8


class LogStoreConfig(BaseModel):
    """Relational conversation log configuration."""

    enabled: bool = True
    db_path: str = "data/contextmem.db"


class Config(BaseModel):
    """Main configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    embedder: EmbedderConfig = Field(default_factory=EmbedderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    qdrant: QdrantConfig = Field(default_factory=QdrantConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    documents: DocumentConfig = Field(default_factory=DocumentConfig)
    log_store: LogStoreConfig = Field(default_factory=LogStoreConfig)

    # Vector index backend: qdrant or memory
    vector_backend: str = "qdrant"

    # Optional personality profile (JSON) rendered into the system prompt
    personality_path: str | None = None

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            CONTEXTMEM_LLM_PROVIDER: LLM provider (ollama, openai)
            CONTEXTMEM_LLM_MODEL: LLM model name
            CONTEXTMEM_LLM_BASE_URL: LLM base URL
            CONTEXTMEM_LLM_API_KEY: LLM API key (for OpenAI)
            CONTEXTMEM_LLM_SYSTEM_PROMPT: System prompt sent with each completion
            CONTEXTMEM_EMBEDDER_PROVIDER: Embedder provider
            CONTEXTMEM_EMBEDDER_MODEL: Embedder model name
            CONTEXTMEM_EMBEDDER_API_KEY: Embedder API key (for OpenAI)
            CONTEXTMEM_EMBEDDER_DIMENSION: Embedding dimension
            CONTEXTMEM_VECTOR_BACKEND: Vector index backend (qdrant, memory)
            CONTEXTMEM_QDRANT_URL: Qdrant URL
            CONTEXTMEM_SESSION_WINDOW_MINUTES: Session continuation window
            CONTEXTMEM_MAX_CONTEXT_CHARS: Context character budget
            CONTEXTMEM_CHUNK_SIZE_WORDS: Document chunk window size
            CONTEXTMEM_LOG_DB_PATH: SQLite path of the conversation log
            CONTEXTMEM_PERSONALITY_PATH: Personality profile JSON file
        """
        # Load .env file if provided or exists
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            # If value is empty string, return default
            if value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            llm=LLMConfig(
                provider=get_env("CONTEXTMEM_LLM_PROVIDER", "openai"),
                model=get_env("CONTEXTMEM_LLM_MODEL", "gpt-4o-mini"),
                base_url=get_env("CONTEXTMEM_LLM_BASE_URL"),
                api_key=get_env("CONTEXTMEM_LLM_API_KEY"),
                system_prompt=get_env(
                    "CONTEXTMEM_LLM_SYSTEM_PROMPT", "You are a helpful assistant."
                ),
                temperature=get_env("CONTEXTMEM_LLM_TEMPERATURE", 0.7),
                max_tokens=get_env("CONTEXTMEM_LLM_MAX_TOKENS", 2000),
                timeout=get_env("CONTEXTMEM_LLM_TIMEOUT", 120.0),
            ),
            embedder=EmbedderConfig(
                provider=get_env("CONTEXTMEM_EMBEDDER_PROVIDER", "openai"),
                model=get_env("CONTEXTMEM_EMBEDDER_MODEL", "text-embedding-3-small"),
                base_url=get_env("CONTEXTMEM_EMBEDDER_BASE_URL"),
                api_key=get_env("CONTEXTMEM_EMBEDDER_API_KEY"),
                timeout=get_env("CONTEXTMEM_EMBEDDER_TIMEOUT", 120.0),
                dimension=get_env("CONTEXTMEM_EMBEDDER_DIMENSION", 1536),
            ),
            vector_backend=get_env("CONTEXTMEM_VECTOR_BACKEND", "qdrant"),
            personality_path=get_env("CONTEXTMEM_PERSONALITY_PATH"),
            qdrant=QdrantConfig(
                url=get_env("CONTEXTMEM_QDRANT_URL", "http://localhost:6333"),
                use_grpc=get_env("CONTEXTMEM_QDRANT_USE_GRPC", False),
                timeout=get_env("CONTEXTMEM_QDRANT_TIMEOUT", 30),
            ),
            memory=MemoryConfig(
                collection_name=get_env("CONTEXTMEM_MEMORY_COLLECTION", "conversation_memory"),
                session_window_minutes=get_env("CONTEXTMEM_SESSION_WINDOW_MINUTES", 30),
                retention_days=get_env("CONTEXTMEM_RETENTION_DAYS", 30),
                max_context_chars=get_env("CONTEXTMEM_MAX_CONTEXT_CHARS", 4000),
            ),
            documents=DocumentConfig(
                collection_name=get_env("CONTEXTMEM_DOCUMENT_COLLECTION", "document_chunks"),
                insight_collection_name=get_env(
                    "CONTEXTMEM_INSIGHT_COLLECTION", "document_insights"
                ),
                chunk_size_words=get_env("CONTEXTMEM_CHUNK_SIZE_WORDS", 1000),
                cache_capacity=get_env("CONTEXTMEM_CHUNK_CACHE_CAPACITY", 100),
            ),
            log_store=LogStoreConfig(
                enabled=get_env("CONTEXTMEM_LOG_ENABLED", True),
                db_path=get_env("CONTEXTMEM_LOG_DB_PATH", "data/contextmem.db"),
            ),
            logging=LoggingConfig(
                level=get_env("CONTEXTMEM_LOG_LEVEL", "INFO"),
                log_to_file=get_env("CONTEXTMEM_LOG_TO_FILE", False),
                log_dir=get_env("CONTEXTMEM_LOG_DIR", "logs"),
                file_rotation=get_env("CONTEXTMEM_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("CONTEXTMEM_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("CONTEXTMEM_LOG_COMPRESSION", "zip"),
                serialize=get_env("CONTEXTMEM_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file=env_file)

        final_dict = {**config_dict}

        # Apply env overrides (non-default sections only)
        default = cls()
        for section in ("llm", "embedder", "qdrant", "memory", "documents", "log_store", "logging"):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        if env_config.vector_backend != default.vector_backend:
            final_dict["vector_backend"] = env_config.vector_backend
        if env_config.personality_path != default.personality_path:
            final_dict["personality_path"] = env_config.personality_path

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
