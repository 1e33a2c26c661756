"""
Factory for creating LLM providers.

Providers are looked up in a registry mapping provider name to constructor,
so adding a backend means registering one function.
"""

from collections.abc import Callable

from contextmem.config import LLMConfig
from contextmem.core.llm.base import LLMProvider
from contextmem.core.llm.ollama import OllamaLLM
from contextmem.core.llm.openai import OpenAILLM
from contextmem.utils.exceptions import ConfigurationError

LLMConstructor = Callable[[LLMConfig], LLMProvider]


def _create_ollama(config: LLMConfig) -> LLMProvider:
    return OllamaLLM(
        host=config.base_url or "http://localhost:11434",
        model=config.model,
        system_prompt=config.system_prompt,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout,
    )


def _create_openai(config: LLMConfig) -> LLMProvider:
    if not config.api_key:
        raise ConfigurationError("OpenAI API key is required", context={"provider": "openai"})
    return OpenAILLM(
        api_key=config.api_key,
        model=config.model,
        system_prompt=config.system_prompt,
        base_url=config.base_url,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout,
    )


class LLMFactory:
    """Factory for creating LLM providers from configuration."""

    _registry: dict[str, LLMConstructor] = {
        "ollama": _create_ollama,
        "openai": _create_openai,
    }

    @classmethod
    def register(cls, name: str, constructor: LLMConstructor) -> None:
        """Register (or replace) the constructor for a provider name."""
        cls._registry[name] = constructor

    @classmethod
    def providers(cls) -> list[str]:
        return sorted(cls._registry)

    @classmethod
    def create(cls, config: LLMConfig) -> LLMProvider:
        """
        Create LLM provider from configuration.

        Args:
            config: LLM configuration

        Returns:
            LLM provider instance

        Raises:
            ConfigurationError: If provider is not supported or misconfigured
        """
        constructor = cls._registry.get(config.provider)
        if constructor is None:
            raise ConfigurationError(
                f"Unsupported LLM provider: {config.provider}",
                context={"available": cls.providers()},
            )
        return constructor(config)
