"""Shared pytest fixtures for the ragchat test suite."""

from __future__ import annotations

import asyncio
import string
from typing import Any

import pytest

from ragchat.config.settings import Settings
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import ILLMProvider
from ragchat.models.conversation import ChatMessage
from ragchat.models.rag import DocumentChunk, RetrievedChunk
from ragchat.models.synthesis import Completion
from ragchat.providers.vector_store.memory_vector_store import InMemoryVectorStore
from ragchat.services.document_registry import DocumentRegistry
from ragchat.services.memory_store import ConversationMemoryStore
from ragchat.utils.errors import EmbeddingError, LLMError

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class LetterFrequencyEmbedder(IEmbeddingProvider):
    """Deterministic embedder: one dimension per letter plus one for everything else.

    Texts made of the same letters embed to the same direction, which makes
    similarity rankings predictable in tests.
    """

    DIMENSION = 27

    def __init__(self, fail: bool = False, delay: float = 0.0) -> None:
        self.fail = fail
        self.delay = delay
        self.calls: list[list[str]] = []

    def vector(self, text: str) -> list[float]:
        counts = [0.0] * self.DIMENSION
        for ch in text.lower():
            idx = string.ascii_lowercase.find(ch)
            counts[idx if idx >= 0 else 26] += 1.0
        return counts

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise EmbeddingError("embedding backend down", provider_name="fake")
        return [self.vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    def get_dimension(self) -> int:
        return self.DIMENSION

    def get_provider_name(self) -> str:
        return "fake_embedding"

    def is_available(self) -> bool:
        return True


class ScriptedLLM(ILLMProvider):
    """LLM fake that returns numbered replies and records every request."""

    def __init__(self, fail: bool = False, delay: float = 0.0, text: str | None = None) -> None:
        self.fail = fail
        self.delay = delay
        self.text = text
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        history: list[ChatMessage] | None = None,
        temperature: float = 0.1,
        max_tokens: int = 1000,
    ) -> Completion:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "history": list(history or []),
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise LLMError("model unavailable", provider_name="fake")
        return Completion(text=self.text or f"reply {len(self.calls)}", model="fake-model")

    def get_provider_name(self) -> str:
        return "fake_llm"

    def is_available(self) -> bool:
        return True

    async def validate_credentials(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_chunk(
    text: str = "sample text",
    document_id: str = "doc-1",
    filename: str = "sample.txt",
    chunk_index: int = 0,
    page_number: int | None = None,
) -> DocumentChunk:
    return DocumentChunk(
        chunk_id=f"{document_id}-{chunk_index}",
        document_id=document_id,
        filename=filename,
        text=text,
        chunk_index=chunk_index,
        page_number=page_number,
    )


def make_retrieved(text: str = "sample text", score: float = 0.9, **kwargs: Any) -> RetrievedChunk:
    return RetrievedChunk(chunk=make_chunk(text=text, **kwargs), similarity_score=score)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, openai_api_key="test-key")


@pytest.fixture
def embedder() -> LetterFrequencyEmbedder:
    return LetterFrequencyEmbedder()


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def vector_store(embedder: LetterFrequencyEmbedder) -> InMemoryVectorStore:
    return InMemoryVectorStore(embedding_provider=embedder)


@pytest.fixture
def registry() -> DocumentRegistry:
    return DocumentRegistry()


@pytest.fixture
def memory() -> ConversationMemoryStore:
    return ConversationMemoryStore()
