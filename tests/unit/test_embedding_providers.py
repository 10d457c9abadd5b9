"""Unit tests for embedding provider adapters: OpenAI-compatible and sentence-transformers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np
import openai
import pytest

from ragchat.config.settings import Settings
from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from ragchat.providers.embedding.sentence_transformer_embedding_provider import (
    SentenceTransformerEmbeddingProvider,
)
from ragchat.utils.errors import EmbeddingError

_CLIENT_PATH = "ragchat.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI"


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "embedding_model": "text-embedding-3-small",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _embedding_response(vectors: list[list[float]], order: list[int] | None = None) -> MagicMock:
    order = order if order is not None else list(range(len(vectors)))
    response = MagicMock()
    response.data = [MagicMock(index=i, embedding=vectors[i]) for i in order]
    response.usage = MagicMock(total_tokens=10)
    return response


# ======================================================================
# OpenAI-compatible embeddings
# ======================================================================


class TestOpenAIEmbeddingProvider:
    def test_metadata(self) -> None:
        with patch(_CLIENT_PATH):
            provider = OpenAIEmbeddingProvider(_settings())

        assert provider.get_provider_name() == "openai_embedding"
        assert provider.get_dimension() == 1536
        assert provider.is_available() is True

    def test_large_model_dimension(self) -> None:
        with patch(_CLIENT_PATH):
            provider = OpenAIEmbeddingProvider(_settings(embedding_model="text-embedding-3-large"))
        assert provider.get_dimension() == 3072

    @pytest.mark.asyncio
    async def test_embed_restores_input_order(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            return_value=_embedding_response([[1.0, 0.0], [0.0, 1.0], [0.5, 0.5]], order=[2, 0, 1])
        )

        with patch(_CLIENT_PATH, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(_settings())
            result = await provider.embed(["a", "b", "c"])

        assert result == [[1.0, 0.0], [0.0, 1.0], [0.5, 0.5]]

    @pytest.mark.asyncio
    async def test_embed_empty_skips_api(self) -> None:
        mock_client = AsyncMock()

        with patch(_CLIENT_PATH, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(_settings())
            assert await provider.embed([]) == []

        mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_batches_large_inputs(self) -> None:
        def _respond(input, model):  # noqa: A002, ANN001, ANN202
            return _embedding_response([[float(len(input))] for _ in input])

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(side_effect=_respond)

        with patch(_CLIENT_PATH, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(_settings())
            result = await provider.embed(["t"] * 2050)

        assert mock_client.embeddings.create.await_count == 2
        assert len(result) == 2050
        assert result[0] == [2048.0]
        assert result[-1] == [2.0]

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([[0.1, 0.2]]))

        with patch(_CLIENT_PATH, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(_settings())
            assert await provider.embed_single("hello") == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_embed_api_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="Rate limit", request=MagicMock(), body=None)
        )

        with patch(_CLIENT_PATH, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingError):
                await provider.embed(["test"])

    @pytest.mark.asyncio
    async def test_embed_count_mismatch(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([[0.1]]))

        with patch(_CLIENT_PATH, return_value=mock_client):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingError):
                await provider.embed(["one", "two"])


# ======================================================================
# Local sentence-transformers
# ======================================================================


class TestSentenceTransformerEmbeddingProvider:
    def test_metadata(self) -> None:
        provider = SentenceTransformerEmbeddingProvider()
        assert provider.get_dimension() == 384
        assert provider.get_provider_name() == "sentence_transformer_all-MiniLM-L6-v2"

    @pytest.mark.asyncio
    async def test_embed_uses_normalised_encode(self) -> None:
        model = MagicMock()
        model.encode.return_value = np.array([[0.6, 0.8], [1.0, 0.0]])
        provider = SentenceTransformerEmbeddingProvider()

        with patch.object(provider, "_load_model", return_value=model):
            result = await provider.embed(["a", "b"])

        assert result == [[0.6, 0.8], [1.0, 0.0]]
        assert model.encode.call_args.kwargs["normalize_embeddings"] is True

    @pytest.mark.asyncio
    async def test_encode_failure_wrapped(self) -> None:
        model = MagicMock()
        model.encode.side_effect = RuntimeError("out of memory")
        provider = SentenceTransformerEmbeddingProvider()

        with patch.object(provider, "_load_model", return_value=model):
            with pytest.raises(EmbeddingError):
                await provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_embed_empty(self) -> None:
        provider = SentenceTransformerEmbeddingProvider()
        assert await provider.embed([]) == []
