"""
Custom exception hierarchy for contextmem.

Provides structured error types for better error handling and debugging.
All exceptions inherit from ContextMemError for easy catching.
"""


class ContextMemError(Exception):
    """
    Base exception for all contextmem errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize contextmem error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ProviderError(ContextMemError):
    """
    Backend call errors.
    Raised when a completion or embedding backend fails (network, auth, quota, format).
    """

    pass


class LLMError(ProviderError):
    """
    Completion backend errors.
    Raised when LLM operations fail (API errors, timeouts, empty replies).
    """

    pass


class EmbeddingError(ProviderError):
    """
    Embedding backend errors.
    Raised when embedding generation fails.
    """

    pass


class DimensionError(ContextMemError):
    """
    Vector length mismatch.
    Raised when a vector does not have the configured embedding dimension.
    """

    def __init__(self, expected: int, actual: int, context: dict | None = None):
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}",
            context={"expected": expected, "actual": actual, **(context or {})},
        )
        self.expected = expected
        self.actual = actual


class ParseError(ContextMemError):
    """
    Insight response parsing errors.
    Only raised by individual parsing stages; the recovery chain never lets it escape.
    """

    pass


class StoreError(ContextMemError):
    """
    Base exception for store operations.
    """

    pass


class VectorStoreError(StoreError):
    """
    Vector index operation errors.
    Raised when create/upsert/search/delete against the vector index fails.
    """

    pass


class LogStoreError(StoreError):
    """
    Relational log errors.
    Raised when the durable conversation/insight log cannot be read or written.
    """

    pass


class ValidationError(ContextMemError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    pass


class ConfigurationError(ContextMemError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
