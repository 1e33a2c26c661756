"""
Active model backend: the selected provider name next to its live handles.
"""

from dataclasses import dataclass

from contextmem.config import Config
from contextmem.core.embeddings.base import Embedder
from contextmem.core.factory.embedder_factory import EmbedderFactory
from contextmem.core.factory.llm_factory import LLMFactory
from contextmem.core.llm.base import LLMProvider
from contextmem.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ActiveBackend:
    """
    Currently selected completion/embedding backend.

    ``name`` is the LLM provider name the handles were built from.
    """

    name: str
    llm: LLMProvider
    embedder: Embedder

    @classmethod
    def from_config(cls, config: Config) -> "ActiveBackend":
        llm = LLMFactory.create(config.llm)
        embedder = EmbedderFactory.create(config.embedder)
        logger.info(
            f"Active backend: {llm.describe_model()}",
            extra={"llm": config.llm.provider, "embedder": config.embedder.provider},
        )
        return cls(name=config.llm.provider, llm=llm, embedder=embedder)

    async def complete(self, prompt: str, **kwargs) -> str:
        return await self.llm.complete(prompt, **kwargs)

    async def embed(self, text: str) -> list[float]:
        return await self.embedder.embed(text)

    def describe_model(self) -> str:
        return self.llm.describe_model()

    def update_system_prompt(self, system_prompt: str) -> None:
        self.llm.update_system_prompt(system_prompt)

    def describe(self) -> str:
        return f"{self.name} ({self.llm.describe_model()})"

    async def close(self) -> None:
        await self.llm.close()
        await self.embedder.close()
