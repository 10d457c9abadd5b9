"""Pydantic request/response schemas for the ragchat HTTP API.

JSON field names are camelCase (``userId``, ``documentId``,
``clearMemory``) on the wire and snake_case in Python.  Request bodies
accept either spelling.

Required-field checks for ``question``, ``message`` and friends happen in
the service layer, so a missing value is reported as a 400 with the same
error body as every other validation failure rather than FastAPI's 422.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class AskRequest(_CamelModel):
    """A question to answer from the uploaded documents."""

    question: str = ""
    user_id: str | None = None


class ChatRequest(_CamelModel):
    """A free-form chat message."""

    message: str = ""
    user_id: str | None = None
    clear_memory: bool = False


class SummarizeRequest(_CamelModel):
    """Either raw ``text`` or a ``documentId`` to summarise."""

    text: str | None = None
    document_id: str | None = None


class Base64UploadRequest(_CamelModel):
    """A document sent as base64 inside JSON."""

    filename: str = ""
    content: str = Field(default="", description="Base64 bytes, optionally as a data URL.")


class TextIngestRequest(_CamelModel):
    """Raw text to ingest as a document."""

    text: str = ""
    filename: str = "document.txt"


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UploadResponse(_CamelModel):
    success: bool = True
    message: str
    document_id: str
    chunks: int
    filename: str


class SourceSchema(_CamelModel):
    source: str
    page: str
    content_preview: str
    chunk_id: str
    score: float | None = None


class AskResponse(_CamelModel):
    answer: str
    sources: list[SourceSchema] = Field(default_factory=list)
    user_id: str
    relevant_chunks: int
    degraded: bool = False


class ChatResponse(_CamelModel):
    response: str
    user_id: str
    memory_length: int
    timestamp: datetime
    degraded: bool = False


class SummarizeResponse(_CamelModel):
    summary: str
    original_length: int
    summary_length: int
    type: Literal["text", "document"]
    document_name: str | None = None


class DocumentSchema(_CamelModel):
    id: str
    filename: str
    chunks: int
    uploaded_at: datetime
    size: int


class DocumentsResponse(_CamelModel):
    total_documents: int
    documents: list[DocumentSchema] = Field(default_factory=list)


class MessageSchema(_CamelModel):
    type: Literal["user", "assistant"]
    content: str
    timestamp: datetime


class MemoryResponse(_CamelModel):
    user_id: str
    message_count: int
    recent_messages: list[MessageSchema] = Field(default_factory=list)
    status: Literal["active", "empty"]


class ClearMemoryResponse(_CamelModel):
    success: bool
    message: str
    user_id: str


class StatusStats(_CamelModel):
    documents: int
    users: int
    chunks: int


class StatusResponse(_CamelModel):
    api: str = "ragchat"
    status: Literal["ready", "initializing"]
    timestamp: datetime
    stats: StatusStats
    llm_provider: str | None = None
    embedding_provider: str | None = None


class HealthResponse(_CamelModel):
    status: str = "ok"
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
