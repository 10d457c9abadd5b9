"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **extract -> chunk -> embed -> store -> register**.

Every public ``ingest_*`` method funnels into :meth:`IngestionService.ingest_document`:

    1. ITextExtractor     -- binary uploads become page texts
    2. TextChunker        -- pages become overlapping windows
    3. IEmbeddingProvider -- every window is embedded up front
    4. IVectorStoreProvider -- all chunks are appended in one write
    5. DocumentRegistry   -- a new DocumentRecord is registered

Embedding happens before anything is written, so a failed or timed-out
embedding call leaves both the index and the registry untouched.  There
is no deduplication: ingesting identical content twice creates two
documents.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import time
import uuid
from typing import TYPE_CHECKING

import structlog

from ragchat.models.rag import DocumentRecord, IngestionResult
from ragchat.services.ingestion.chunker import TextChunker
from ragchat.utils.errors import (
    EmbeddingError,
    ExtractionError,
    RagChatError,
    UnavailableError,
    ValidationError,
)

if TYPE_CHECKING:
    from ragchat.interfaces.embedding_provider import IEmbeddingProvider
    from ragchat.interfaces.text_extractor import ITextExtractor
    from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
    from ragchat.services.document_registry import DocumentRegistry

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Turns uploaded content into indexed chunks and a registry record.

    Parameters
    ----------
    chunker:
        Splits page text into overlapping windows.
    embedding_provider:
        Generates embedding vectors for chunk text.
    vector_store:
        Receives the embedded chunks.
    registry:
        Receives one :class:`DocumentRecord` per successful ingestion.
    extractor:
        Turns binary uploads into page texts.  Only needed by
        :meth:`ingest_file` and :meth:`ingest_base64`.
    embedding_timeout:
        Seconds allowed for embedding one document; ``None`` waits forever.
    """

    def __init__(
        self,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        registry: DocumentRegistry,
        extractor: ITextExtractor | None = None,
        embedding_timeout: float | None = None,
    ) -> None:
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._registry = registry
        self._extractor = extractor
        self._embedding_timeout = embedding_timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_document(
        self,
        pages: list[str],
        filename: str,
        size_bytes: int | None = None,
        paged: bool = True,
    ) -> IngestionResult:
        """Chunk, embed, store and register pre-extracted *pages*.

        Raises
        ------
        ValidationError
            If *filename* is blank.
        ExtractionError
            If no page contains non-whitespace text.
        EmbeddingError
            If embedding fails or times out; nothing is written.
        """
        start = time.monotonic()
        if not filename or not filename.strip():
            raise ValidationError("A filename is required")
        if not any(page and page.strip() for page in pages):
            raise ExtractionError(f"No readable content in '{filename}'")

        document_id = str(uuid.uuid4())
        chunks = self._chunker.chunk_pages(pages, document_id, filename, paged=paged)
        embeddings = await self._embed([c.text for c in chunks], filename)

        await self._vector_store.add_chunks(chunks, embeddings)

        total_characters = sum(len(p) for p in pages)
        record = DocumentRecord(
            document_id=document_id,
            filename=filename,
            chunk_count=len(chunks),
            size_bytes=(
                size_bytes
                if size_bytes is not None
                else sum(len(p.encode("utf-8")) for p in pages)
            ),
        )
        self._registry.register(record)

        elapsed = time.monotonic() - start
        logger.info(
            "ingestion_complete",
            document_id=document_id,
            filename=filename,
            chunks=len(chunks),
            characters=total_characters,
            elapsed_s=round(elapsed, 3),
        )
        return IngestionResult(
            document_id=document_id,
            filename=filename,
            chunks_created=len(chunks),
            total_characters=total_characters,
            ingestion_time=elapsed,
        )

    async def ingest_text(self, text: str, filename: str) -> IngestionResult:
        """Ingest raw text as a single unpaged document."""
        return await self.ingest_document([text], filename, paged=False)

    async def ingest_file(self, data: bytes, filename: str) -> IngestionResult:
        """Extract text from a binary upload and ingest it."""
        if self._extractor is None:
            raise UnavailableError("Text extraction is not configured")
        if not filename or not filename.strip():
            raise ValidationError("A filename is required")

        pages = await self._extractor.extract(data, filename)
        if not pages:
            raise ExtractionError(f"No pages extracted from '{filename}'")

        paged = len(pages) > 1 or data[:5] == b"%PDF-"
        return await self.ingest_document(pages, filename, size_bytes=len(data), paged=paged)

    async def ingest_base64(self, payload: str, filename: str) -> IngestionResult:
        """Decode a base64 (optionally data-URL) payload and ingest it as a file."""
        if not payload or not payload.strip():
            raise ValidationError("Base64 content is required")

        encoded = payload.strip()
        # Accept "data:application/pdf;base64,...." as sent by browsers.
        if encoded.startswith("data:") and "," in encoded:
            encoded = encoded.split(",", 1)[1]
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError("Content is not valid base64") from exc
        if not data:
            raise ValidationError("Base64 content decoded to zero bytes")

        return await self.ingest_file(data, filename)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _embed(self, texts: list[str], filename: str) -> list[list[float]]:
        try:
            embeddings = await asyncio.wait_for(
                self._embedding_provider.embed(texts),
                timeout=self._embedding_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("ingestion_embedding_timeout", filename=filename, chunks=len(texts))
            raise EmbeddingError(
                f"Embedding '{filename}' timed out",
                provider_name=self._embedding_provider.get_provider_name(),
            ) from exc
        except EmbeddingError:
            logger.error("ingestion_embedding_failed", filename=filename, chunks=len(texts))
            raise
        except RagChatError as exc:
            logger.error("ingestion_embedding_failed", filename=filename, error=str(exc))
            raise EmbeddingError(str(exc), provider_name=exc.provider_name) from exc

        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got {len(embeddings)}",
                provider_name=self._embedding_provider.get_provider_name(),
            )
        return embeddings
