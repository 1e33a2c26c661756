"""
Abstract base class for LLM providers.
"""

from abc import ABC, abstractmethod


class LLMProvider(ABC):
    """
    Abstract base for completion backends.

    The interface is closed: complete, describe_model, update_system_prompt
    and close. Every completion is sent with the provider's current system
    prompt.
    """

    def __init__(self, system_prompt: str = "You are a helpful assistant."):
        self._system_prompt = system_prompt

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def update_system_prompt(self, system_prompt: str) -> None:
        """Replace the system prompt used for subsequent completions."""
        self._system_prompt = system_prompt

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs,
    ) -> str:
        """
        Generate completion from prompt.

        Args:
            prompt: The input prompt
            max_tokens: Maximum tokens to generate (provider default if None)
            temperature: Sampling temperature (provider default if None)
            **kwargs: Provider-specific parameters

        Returns:
            Completion text

        Raises:
            ValidationError: If the prompt is empty
            LLMError: If the backend call fails or returns no content
        """
        pass

    @abstractmethod
    def describe_model(self) -> str:
        """Human-readable ``provider:model`` description."""
        pass

    @abstractmethod
    async def close(self):
        """
        Close any open connections.
        """
        pass
