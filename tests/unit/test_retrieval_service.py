"""Unit tests for RetrievalService."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.providers.vector_store.memory_vector_store import InMemoryVectorStore
from ragchat.services.retrieval_service import RetrievalService
from ragchat.utils.errors import EmbeddingError, ValidationError
from tests.conftest import LetterFrequencyEmbedder, make_chunk


class TestRetrievalService:
    @pytest.mark.asyncio
    async def test_empty_index_returns_empty(self, vector_store: InMemoryVectorStore) -> None:
        service = RetrievalService(vector_store)
        assert await service.search("what is this?", 4) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("k", [0, -1, True, 2.5, "3"])
    async def test_invalid_k_rejected(self, vector_store: InMemoryVectorStore, k: object) -> None:
        service = RetrievalService(vector_store)
        with pytest.raises(ValidationError):
            await service.search("question", k)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_blank_query_rejected(self, vector_store: InMemoryVectorStore) -> None:
        service = RetrievalService(vector_store)
        with pytest.raises(ValidationError):
            await service.search("   ", 3)

    @pytest.mark.asyncio
    async def test_returns_ranked_results(
        self, vector_store: InMemoryVectorStore, embedder: LetterFrequencyEmbedder
    ) -> None:
        texts = ["zzzz", "aaaa"]
        await vector_store.add_chunks(
            [make_chunk(text=t, chunk_index=i) for i, t in enumerate(texts)],
            [embedder.vector(t) for t in texts],
        )
        service = RetrievalService(vector_store)

        results = await service.search("aa", 1)

        assert [r.chunk.text for r in results] == ["aaaa"]

    @pytest.mark.asyncio
    async def test_embedding_failure_absorbed(self) -> None:
        store = MagicMock(spec=IVectorStoreProvider)
        store.query = AsyncMock(side_effect=EmbeddingError("down", provider_name="fake"))
        service = RetrievalService(store)

        assert await service.search("question", 4) == []

    @pytest.mark.asyncio
    async def test_timeout_absorbed(self) -> None:
        embedder = LetterFrequencyEmbedder(delay=0.5)
        store = InMemoryVectorStore(embedding_provider=embedder)
        await store.add_chunks([make_chunk()], [embedder.vector("sample text")])
        service = RetrievalService(store, timeout=0.01)

        assert await service.search("sample", 2) == []
