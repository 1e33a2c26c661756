"""
OpenAI LLM provider using official SDK.
"""

from openai import AsyncOpenAI

from contextmem.core.llm.base import LLMProvider
from contextmem.utils.exceptions import LLMError, ValidationError
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAILLM(LLMProvider):
    """
    OpenAI chat-completions provider.

    Also works against OpenAI-compatible gateways (DeepSeek, OpenRouter,
    Mistral) through ``base_url``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        system_prompt: str = "You are a helpful assistant.",
        organization: str | None = None,
        base_url: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 120.0,
    ):
        """
        Initialize OpenAI LLM provider.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini")
            system_prompt: Initial system prompt
            organization: Optional organization ID
            base_url: Optional custom base URL
            temperature: Default sampling temperature
            max_tokens: Default completion length
            timeout: Request timeout in seconds
        """
        super().__init__(system_prompt)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        self.client = AsyncOpenAI(
            api_key=api_key, organization=organization, base_url=base_url, timeout=timeout
        )

    async def complete(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs,
    ) -> str:
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]

        params = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.max_tokens,
            **kwargs,
        }

        try:
            response = await self.client.chat.completions.create(**params)
            content = response.choices[0].message.content if response.choices else None

            if not content:
                raise LLMError("OpenAI returned empty content")

            return content
        except Exception as e:
            logger.error(
                f"OpenAI API error: {e}",
                extra={"model": self.model, "error": str(e), "error_type": type(e).__name__},
            )
            if isinstance(e, LLMError):
                raise
            raise LLMError(f"OpenAI API error: {e}") from e

    def describe_model(self) -> str:
        return f"openai:{self.model}"

    async def close(self):
        """Close OpenAI client."""
        await self.client.close()
