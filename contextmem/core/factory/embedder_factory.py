"""
Factory for creating embedder providers.
"""

from collections.abc import Callable

from contextmem.config import EmbedderConfig
from contextmem.core.embeddings.base import Embedder
from contextmem.core.embeddings.ollama import OllamaEmbedder
from contextmem.core.embeddings.openai import OpenAIEmbedder
from contextmem.utils.exceptions import ConfigurationError

EmbedderConstructor = Callable[[EmbedderConfig], Embedder]


def _create_ollama(config: EmbedderConfig) -> Embedder:
    return OllamaEmbedder(
        host=config.base_url or "http://localhost:11434",
        model=config.model,
        timeout=config.timeout,
    )


def _create_openai(config: EmbedderConfig) -> Embedder:
    if not config.api_key:
        raise ConfigurationError("OpenAI API key is required", context={"provider": "openai"})
    return OpenAIEmbedder(
        api_key=config.api_key,
        model=config.model,
        dimensions=config.dimension,
        base_url=config.base_url,
        timeout=config.timeout,
    )


class EmbedderFactory:
    """Factory for creating embedder providers from configuration."""

    _registry: dict[str, EmbedderConstructor] = {
        "ollama": _create_ollama,
        "openai": _create_openai,
    }

    @classmethod
    def register(cls, name: str, constructor: EmbedderConstructor) -> None:
        """Register (or replace) the constructor for a provider name."""
        cls._registry[name] = constructor

    @classmethod
    def providers(cls) -> list[str]:
        return sorted(cls._registry)

    @classmethod
    def create(cls, config: EmbedderConfig) -> Embedder:
        """
        Create embedder from configuration.

        Raises:
            ConfigurationError: If provider is not supported or misconfigured
        """
        constructor = cls._registry.get(config.provider)
        if constructor is None:
            raise ConfigurationError(
                f"Unsupported embedder provider: {config.provider}",
                context={"available": cls.providers()},
            )
        return constructor(config)
