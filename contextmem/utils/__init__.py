"""Utility modules for contextmem."""

from contextmem.utils.concurrency import bounded_gather
from contextmem.utils.exceptions import (
    ConfigurationError,
    ContextMemError,
    DimensionError,
    EmbeddingError,
    LLMError,
    LogStoreError,
    ParseError,
    ProviderError,
    StoreError,
    ValidationError,
    VectorStoreError,
)
from contextmem.utils.id_generator import (
    generate_chunk_key,
    generate_point_id,
    generate_session_id,
)
from contextmem.utils.logger import get_logger, setup_logging, setup_logging_from_config
from contextmem.utils.vectors import ensure_dimension, zero_vector

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "setup_logging_from_config",
    # ID Generators
    "generate_session_id",
    "generate_point_id",
    "generate_chunk_key",
    # Vectors & concurrency
    "ensure_dimension",
    "zero_vector",
    "bounded_gather",
    # Exceptions
    "ContextMemError",
    "ProviderError",
    "LLMError",
    "EmbeddingError",
    "DimensionError",
    "ParseError",
    "StoreError",
    "VectorStoreError",
    "LogStoreError",
    "ValidationError",
    "ConfigurationError",
]
