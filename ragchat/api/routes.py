"""FastAPI routes for ragchat.

Every handler is a thin translation between HTTP schemas and
:class:`~ragchat.services.rag_service.RAGService`; domain errors propagate
to :class:`~ragchat.api.middleware.ErrorHandlingMiddleware`.

# Endpoint                      Method  Description
# ────────────────────────────────────────────────────────────────
# /api/health                   GET     Liveness probe
# /api/status                   GET     Readiness + corpus/user counters
# /api/upload                   POST    Multipart document upload
# /api/upload/base64            POST    Base64 document upload (JSON)
# /api/ingest/text              POST    Raw text ingestion
# /api/ask                      POST    Question answered from documents
# /api/chat                     POST    Conversation without retrieval
# /api/summarize                POST    Summarise text or a document
# /api/documents                GET     List ingested documents
# /api/memory/{user_id}         GET     Recent conversation messages
# /api/memory/{user_id}         DELETE  Clear a user's conversation
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from ragchat.api.schemas import (
    AskRequest,
    AskResponse,
    Base64UploadRequest,
    ChatRequest,
    ChatResponse,
    ClearMemoryResponse,
    DocumentSchema,
    DocumentsResponse,
    ErrorResponse,
    HealthResponse,
    MemoryResponse,
    MessageSchema,
    SourceSchema,
    StatusResponse,
    StatusStats,
    SummarizeRequest,
    SummarizeResponse,
    TextIngestRequest,
    UploadResponse,
)
from ragchat.config.settings import Settings
from ragchat.models.rag import IngestionResult
from ragchat.services.rag_service import RAGService

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter(prefix="/api")

_UPLOAD_CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Dependencies (populated on app.state by main._lifespan)
# ---------------------------------------------------------------------------


def _get_rag_service(request: Request) -> RAGService:
    return request.app.state.rag_service


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


RAGServiceDep = Annotated[RAGService, Depends(_get_rag_service)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _upload_response(result: IngestionResult) -> UploadResponse:
    return UploadResponse(
        message=f"Document '{result.filename}' processed into {result.chunks_created} chunks",
        document_id=result.document_id,
        chunks=result.chunks_created,
        filename=result.filename,
    )


# ---------------------------------------------------------------------------
# Health / status
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health() -> HealthResponse:
    return HealthResponse(timestamp=_now())


@router.get("/status", response_model=StatusResponse, summary="Readiness and counters")
async def status(rag: RAGServiceDep) -> StatusResponse:
    snapshot = await rag.get_status()
    return StatusResponse(
        status="ready" if snapshot.ready else "initializing",
        timestamp=_now(),
        stats=StatusStats(
            documents=snapshot.documents,
            users=snapshot.users,
            chunks=snapshot.chunks,
        ),
        llm_provider=snapshot.llm_provider,
        embedding_provider=snapshot.embedding_provider,
    )


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Upload a document (multipart)",
)
async def upload_document(
    rag: RAGServiceDep,
    settings: SettingsDep,
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse:
    """Accept a PDF or text file, index it, and register the document."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # Read in pieces so an oversized upload is rejected early.
    parts: list[bytes] = []
    total_size = 0
    while True:
        part = await file.read(_UPLOAD_CHUNK_SIZE)
        if not part:
            break
        total_size += len(part)
        if total_size > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum: {settings.max_upload_bytes} bytes.",
            )
        parts.append(part)
    data = b"".join(parts)

    logger.info("upload_received", filename=file.filename, size=len(data))
    result = await rag.ingest_file(data, file.filename)
    return _upload_response(result)


@router.post(
    "/upload/base64",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Upload a document as base64 JSON",
)
async def upload_base64(
    body: Base64UploadRequest,
    rag: RAGServiceDep,
    settings: SettingsDep,
) -> UploadResponse:
    # Base64 inflates by 4/3; compare the decoded size estimate.
    if len(body.content) * 3 // 4 > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum: {settings.max_upload_bytes} bytes.",
        )
    result = await rag.ingest_base64(body.content, body.filename)
    return _upload_response(result)


@router.post(
    "/ingest/text",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Ingest raw text as a document",
)
async def ingest_text(body: TextIngestRequest, rag: RAGServiceDep) -> UploadResponse:
    result = await rag.ingest_text(body.text, body.filename)
    return _upload_response(result)


# ---------------------------------------------------------------------------
# Ask / chat / summarize
# ---------------------------------------------------------------------------


@router.post(
    "/ask",
    response_model=AskResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Ask a question about the uploaded documents",
)
async def ask(body: AskRequest, rag: RAGServiceDep) -> AskResponse:
    result = await rag.ask(body.user_id, body.question)
    return AskResponse(
        answer=result.answer,
        sources=[SourceSchema(**s.model_dump()) for s in result.sources],
        user_id=result.user_id,
        relevant_chunks=result.relevant_chunks,
        degraded=result.degraded,
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Chat with conversational memory",
)
async def chat(body: ChatRequest, rag: RAGServiceDep) -> ChatResponse:
    result = await rag.chat(body.user_id, body.message, clear_memory=body.clear_memory)
    return ChatResponse(
        response=result.response,
        user_id=result.user_id,
        memory_length=result.memory_length,
        timestamp=result.timestamp,
        degraded=result.degraded,
    )


@router.post(
    "/summarize",
    response_model=SummarizeResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Summarise text or a stored document",
)
async def summarize(body: SummarizeRequest, rag: RAGServiceDep) -> SummarizeResponse:
    result = await rag.summarize(text=body.text, document_id=body.document_id)
    return SummarizeResponse(**result.model_dump())


# ---------------------------------------------------------------------------
# Documents / memory
# ---------------------------------------------------------------------------


@router.get("/documents", response_model=DocumentsResponse, summary="List ingested documents")
async def list_documents(rag: RAGServiceDep) -> DocumentsResponse:
    records = rag.list_documents()
    return DocumentsResponse(
        total_documents=len(records),
        documents=[
            DocumentSchema(
                id=r.document_id,
                filename=r.filename,
                chunks=r.chunk_count,
                uploaded_at=r.uploaded_at,
                size=r.size_bytes,
            )
            for r in records
        ],
    )


@router.get("/memory/{user_id}", response_model=MemoryResponse, summary="Show a user's memory")
async def get_memory(user_id: str, rag: RAGServiceDep) -> MemoryResponse:
    snapshot = rag.get_memory(user_id)
    return MemoryResponse(
        user_id=snapshot.user_id,
        message_count=snapshot.message_count,
        recent_messages=[
            MessageSchema(type=m.role.value, content=m.content, timestamp=m.timestamp)
            for m in snapshot.recent_messages
        ],
        status="active" if snapshot.message_count else "empty",
    )


@router.delete(
    "/memory/{user_id}",
    response_model=ClearMemoryResponse,
    summary="Clear a user's memory",
)
async def clear_memory(user_id: str, rag: RAGServiceDep) -> ClearMemoryResponse:
    existed = rag.clear_memory(user_id)
    return ClearMemoryResponse(
        success=existed,
        message=(
            f"Memory cleared for user {user_id}"
            if existed
            else f"No memory stored for user {user_id}"
        ),
        user_id=user_id,
    )
