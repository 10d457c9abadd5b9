"""Abstract base class for vector-store providers.

Defines the contract for storing embedded chunks and running similarity
queries over them.  The store is append-only: chunks are never updated or
removed once written.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragchat.models.rag import CorpusStats, DocumentChunk, RetrievedChunk


# Concrete implementation: InMemoryVectorStore (ragchat/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the similarity index used by retrieval and summarization."""

    @abstractmethod
    async def query(self, query_text: str, top_k: int = 3) -> list[RetrievedChunk]:
        """Return up to *top_k* chunks most similar to *query_text*.

        Results are ordered by similarity score, highest first.  An empty
        index returns an empty list.  When *top_k* exceeds the number of
        stored chunks, every chunk is returned once.

        Raises
        ------
        ragchat.utils.errors.EmbeddingError
            If the query cannot be embedded.
        """

    @abstractmethod
    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        """Append *chunks* with their pre-computed *embeddings*.

        The write is all-or-nothing: inputs are validated before anything
        is stored, so a rejected batch leaves the index unchanged.

        Returns
        -------
        int
            Number of chunks stored.
        """

    @abstractmethod
    async def list_chunks(self, document_id: str | None = None) -> list[DocumentChunk]:
        """Return stored chunks in insertion order, optionally for one document."""

    @abstractmethod
    async def get_stats(self) -> CorpusStats:
        """Return aggregate statistics about the stored corpus."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this vector store."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store can serve queries."""
