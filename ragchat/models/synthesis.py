"""Result models for generation, answering, summarization and status.

:class:`Completion` is the one shape every LLM adapter returns, so callers
never have to guess which attribute of a provider response holds the text.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ragchat.models.conversation import ChatMessage
from ragchat.models.rag import utc_now


class Completion(BaseModel):
    """Text produced by a single generation call."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Generated text.")
    model: str = Field(default="", description="Model identifier reported by the provider.")
    total_tokens: int | None = Field(default=None, description="Tokens billed, when reported.")


class SourceReference(BaseModel):
    """Attribution for one context chunk used in an answer."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(description="Filename the chunk came from.")
    page: str = Field(default="N/A", description="Page number, or 'N/A' when unknown.")
    content_preview: str = Field(description="First characters of the chunk text.")
    chunk_id: str = Field(description="Identifier of the chunk.")
    score: float | None = Field(default=None, description="Similarity score, when retrieved.")


class AnswerResult(BaseModel):
    """Outcome of one synthesis call."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Assistant reply, or the degraded message on failure.")
    used_context: bool = Field(description="True when at least one context chunk was supplied.")
    sources: list[SourceReference] = Field(default_factory=list)
    degraded: bool = Field(
        default=False,
        description="True when generation failed and the fixed fallback text was returned.",
    )
    memory_length: int = Field(
        default=0,
        description="Stored messages for the user when the call finished, read under the user lock.",
    )


class AskResult(BaseModel):
    """Response to a document-grounded question."""

    model_config = ConfigDict(frozen=True)

    answer: str
    sources: list[SourceReference] = Field(default_factory=list)
    user_id: str
    relevant_chunks: int = Field(ge=0)
    degraded: bool = False


class ChatResult(BaseModel):
    """Response to a free-form chat message."""

    model_config = ConfigDict(frozen=True)

    response: str
    user_id: str
    memory_length: int = Field(ge=0, description="Messages held for the user after this turn.")
    timestamp: datetime = Field(default_factory=utc_now)
    degraded: bool = False


class SummaryResult(BaseModel):
    """Summary of raw text or of a stored document."""

    model_config = ConfigDict(frozen=True)

    summary: str
    original_length: int = Field(ge=0, description="Characters of input before truncation.")
    summary_length: int = Field(ge=0)
    type: Literal["text", "document"]
    document_name: str | None = None


class MemorySnapshot(BaseModel):
    """A read-only view of one user's conversation memory."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    message_count: int = Field(ge=0)
    recent_messages: list[ChatMessage] = Field(default_factory=list)


class SystemStatus(BaseModel):
    """Readiness and corpus counters for the status endpoint."""

    model_config = ConfigDict(frozen=True)

    ready: bool
    documents: int = Field(ge=0)
    users: int = Field(ge=0)
    chunks: int = Field(ge=0)
    llm_provider: str | None = None
    embedding_provider: str | None = None
