"""In-memory registry of ingested documents.

Records are appended once per ingestion and never updated or removed.
Iteration order is insertion order.
"""

from __future__ import annotations

import structlog

from ragchat.models.rag import DocumentRecord

logger = structlog.get_logger(logger_name=__name__)


class DocumentRegistry:
    """Append-only catalogue of :class:`DocumentRecord` objects keyed by id."""

    def __init__(self) -> None:
        # dicts preserve insertion order, which list() relies on.
        self._records: dict[str, DocumentRecord] = {}

    def register(self, record: DocumentRecord) -> None:
        if record.document_id in self._records:
            raise ValueError(f"Document already registered: {record.document_id}")
        self._records[record.document_id] = record
        logger.debug(
            "document_registered",
            document_id=record.document_id,
            filename=record.filename,
            chunks=record.chunk_count,
        )

    def get(self, document_id: str) -> DocumentRecord | None:
        return self._records.get(document_id)

    def list(self) -> list[DocumentRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._records
