"""RAG data models for the ragchat document corpus.

Pydantic v2 models for document chunks, retrieval results, ingestion
results, registry records and corpus statistics.  All models are frozen:
once a chunk or record is created it is never mutated.

Flow of these models through the system:

    1. INGESTION: extracted pages are split into :class:`DocumentChunk`
       windows, each tagged with its owning ``document_id``.
    2. STORAGE: chunks plus their embeddings go into the vector store.
    3. REGISTRATION: a :class:`DocumentRecord` summarising the upload is
       added to the document registry.
    4. RETRIEVAL: a question is embedded and the store returns the most
       similar chunks as :class:`RetrievedChunk` objects.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# DocumentChunk - the unit that is embedded, stored and retrieved.
# ---------------------------------------------------------------------------
class DocumentChunk(BaseModel):
    """A window of text from an uploaded document.

    ``document_id`` is the foreign key to the owning
    :class:`DocumentRecord`; ``filename`` is carried only so answers can
    attribute their sources.  Chunks of one document are numbered by
    ``chunk_index`` in document order, across pages.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Unique identifier (UUID) for this chunk.")
    document_id: str = Field(description="Identifier of the owning document.")
    filename: str = Field(description="Original filename, used for source attribution.")
    text: str = Field(description="The chunk's textual content.")
    chunk_index: int = Field(ge=0, description="Position of this chunk within its document.")
    page_number: int | None = Field(
        default=None,
        ge=1,
        description="1-based page the chunk was cut from, when the source is paged.",
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="UTC timestamp of the ingestion that produced this chunk.",
    )


# ---------------------------------------------------------------------------
# RetrievedChunk - a search result from the vector store.
# ---------------------------------------------------------------------------
class RetrievedChunk(BaseModel):
    """A document chunk returned from a similarity query with its score."""

    model_config = ConfigDict(frozen=True)

    chunk: DocumentChunk = Field(description="The matched document chunk.")
    similarity_score: float = Field(
        ge=-1.0,
        le=1.0,
        description="Cosine similarity between the query and the chunk (higher is closer).",
    )


# ---------------------------------------------------------------------------
# Ingestion and registry records
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Summary of a single completed ingestion call."""

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="Identifier assigned to the ingested document.")
    filename: str = Field(description="Original filename of the document.")
    chunks_created: int = Field(ge=0, description="Number of chunks written to the index.")
    total_characters: int = Field(ge=0, description="Characters of extracted text.")
    ingestion_time: float = Field(ge=0.0, description="Wall-clock seconds spent ingesting.")


class DocumentRecord(BaseModel):
    """Registry entry describing one ingested document.

    Created once per ingestion call and never updated.  Ingesting the same
    content twice yields two records with distinct ids.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="Unique identifier (UUID) of the document.")
    filename: str = Field(description="Original filename.")
    chunk_count: int = Field(ge=0, description="Number of chunks the document produced.")
    uploaded_at: datetime = Field(default_factory=utc_now, description="UTC upload time.")
    size_bytes: int = Field(ge=0, description="Size of the uploaded content in bytes.")


class CorpusStats(BaseModel):
    """Aggregate statistics about the indexed corpus."""

    model_config = ConfigDict(frozen=True)

    total_chunks: int = Field(default=0, ge=0, description="Chunks held in the index.")
    total_documents: int = Field(default=0, ge=0, description="Distinct documents in the index.")
