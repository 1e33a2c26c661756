"""
Tests for OpenAI embedder.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from contextmem.core.embeddings.openai import OpenAIEmbedder
from contextmem.utils.exceptions import DimensionError, EmbeddingError, ValidationError


def _response(*vectors):
    response = MagicMock()
    response.data = [MagicMock(embedding=vector) for vector in vectors]
    return response


@pytest.fixture
def openai_embedder():
    """Create OpenAI embedder for testing."""
    return OpenAIEmbedder(api_key="test-key", model="text-embedding-3-small")


@pytest.mark.unit
@pytest.mark.asyncio
class TestOpenAIEmbedder:
    """Test OpenAI embedder."""

    async def test_embed(self, openai_embedder):
        """Test single embedding."""
        with patch.object(
            openai_embedder.client.embeddings, "create", new_callable=AsyncMock
        ) as mock_create:
            mock_create.return_value = _response([0.1, 0.2, 0.3])

            result = await openai_embedder.embed("hello")

            assert result == [0.1, 0.2, 0.3]
            assert mock_create.call_args.kwargs["input"] == "hello"
            assert mock_create.call_args.kwargs["model"] == "text-embedding-3-small"

    async def test_embed_forwards_dimensions(self):
        """Test the dimensions parameter is sent for text-embedding-3 models."""
        embedder = OpenAIEmbedder(api_key="test-key", dimensions=256)
        with patch.object(embedder.client.embeddings, "create", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = _response([0.0] * 256)

            await embedder.embed("hello")

            assert mock_create.call_args.kwargs["dimensions"] == 256

    async def test_embed_empty_text(self, openai_embedder):
        """Test empty text is rejected."""
        with pytest.raises(ValidationError):
            await openai_embedder.embed("")

    async def test_embed_api_error(self, openai_embedder):
        """Test API errors are wrapped."""
        with patch.object(
            openai_embedder.client.embeddings, "create", new_callable=AsyncMock
        ) as mock_create:
            mock_create.side_effect = Exception("invalid key")

            with pytest.raises(EmbeddingError, match="invalid key"):
                await openai_embedder.embed("hello")

    async def test_embed_checked_wrong_dimension(self, openai_embedder):
        """Test a vector of the wrong length is rejected."""
        with patch.object(
            openai_embedder.client.embeddings, "create", new_callable=AsyncMock
        ) as mock_create:
            mock_create.return_value = _response([0.1, 0.2])

            with pytest.raises(DimensionError):
                await openai_embedder.embed_checked("hello", 1536)
