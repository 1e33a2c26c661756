"""
Ollama LLM provider using native ollama-python SDK.
"""

import ollama

from contextmem.core.llm.base import LLMProvider
from contextmem.utils.exceptions import LLMError, ValidationError
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaLLM(LLMProvider):
    """
    Ollama LLM provider for locally served chat models.
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        system_prompt: str = "You are a helpful assistant.",
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 120.0,
    ):
        """
        Initialize Ollama LLM provider.

        Args:
            host: Ollama server URL
            model: Model name for text generation (e.g., "llama3.1", "mistral")
            system_prompt: Initial system prompt
            temperature: Default sampling temperature
            max_tokens: Default number of tokens to predict
            timeout: Request timeout in seconds
        """
        super().__init__(system_prompt)
        self.host = host
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    async def complete(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs,
    ) -> str:
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        options = {
            "temperature": self.temperature if temperature is None else temperature,
            "num_predict": max_tokens or self.max_tokens,
            **kwargs.pop("options", {}),
        }
        messages = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]

        try:
            response = await self.client.chat(
                model=self.model, messages=messages, options=options, **kwargs
            )
            content = response["message"]["content"]
        except Exception as e:
            logger.error(
                f"Ollama chat error: {e}",
                extra={"model": self.model, "host": self.host, "error": str(e)},
            )
            raise LLMError(f"Ollama chat error: {e}") from e

        if not content:
            raise LLMError("Ollama returned empty content")
        return content

    def describe_model(self) -> str:
        return f"ollama:{self.model}"

    async def close(self):
        """Close client (Ollama SDK handles cleanup internally)."""
        pass
