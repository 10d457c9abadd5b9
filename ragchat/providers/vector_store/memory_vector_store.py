"""In-process vector store using numpy cosine similarity.

Holds every chunk in insertion order alongside an ``(n, d)`` matrix of
L2-normalised embeddings.  A query is one matrix-vector product, which is
plenty for the corpus sizes a single process serves.  Nothing is persisted;
the index is rebuilt by re-ingesting after a restart.

Writes are serialised by an :class:`asyncio.Lock` and swap in new
list/matrix objects, so a concurrent query always sees either the index
before a batch or the index after it, never half of one.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import numpy as np
import structlog

from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.models.rag import CorpusStats, DocumentChunk, RetrievedChunk
from ragchat.utils.errors import EmbeddingError

if TYPE_CHECKING:
    from ragchat.interfaces.embedding_provider import IEmbeddingProvider

logger = structlog.get_logger(logger_name=__name__)


def _normalise(vectors: np.ndarray) -> np.ndarray:
    """Scale rows to unit length; all-zero rows stay zero."""
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms == 0.0] = 1.0
    return vectors / norms


class InMemoryVectorStore(IVectorStoreProvider):
    """Append-only similarity index kept entirely in memory.

    Parameters
    ----------
    embedding_provider:
        Embeds query text.  Must be the same provider that produced the
        stored chunk embeddings.
    """

    def __init__(self, embedding_provider: IEmbeddingProvider) -> None:
        self._embedding_provider = embedding_provider
        self._chunks: list[DocumentChunk] = []
        self._matrix: np.ndarray | None = None
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def query(self, query_text: str, top_k: int = 3) -> list[RetrievedChunk]:
        """Return the *top_k* chunks closest to *query_text*, best first.

        Ties keep insertion order.  An empty index returns ``[]`` without
        calling the embedding provider.
        """
        if top_k <= 0 or not self._chunks:
            return []

        query_vector = await self._embedding_provider.embed_single(query_text)

        # Take both references together after the await; writers replace
        # them as a pair.
        chunks, matrix = self._chunks, self._matrix
        if matrix is None or not chunks:
            return []

        vector = np.asarray(query_vector, dtype=np.float32)
        if vector.ndim != 1 or vector.shape[0] != matrix.shape[1]:
            raise EmbeddingError(
                message=(
                    f"Query embedding has dimension {vector.shape[-1] if vector.ndim else 0}, "
                    f"index expects {matrix.shape[1]}"
                ),
                provider_name=self.get_provider_name(),
            )

        scores = matrix @ _normalise(vector.reshape(1, -1))[0]
        scores = np.clip(scores, -1.0, 1.0)
        k = min(top_k, len(chunks))
        order = np.argsort(-scores, kind="stable")[:k]

        results = [
            RetrievedChunk(chunk=chunks[i], similarity_score=float(scores[i]))
            for i in order
        ]
        logger.debug(
            "vector_query",
            top_k=top_k,
            returned=len(results),
            best_score=results[0].similarity_score if results else None,
        )
        return results

    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        if len(chunks) != len(embeddings):
            raise EmbeddingError(
                message=f"Got {len(embeddings)} embeddings for {len(chunks)} chunks",
                provider_name=self.get_provider_name(),
            )
        if not chunks:
            return 0

        try:
            batch = np.asarray(embeddings, dtype=np.float32)
        except ValueError as exc:
            raise EmbeddingError(
                message=f"Embeddings have inconsistent dimensions: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        if batch.ndim != 2 or batch.shape[1] == 0:
            raise EmbeddingError(
                message="Embeddings must be a non-empty list of equal-length vectors",
                provider_name=self.get_provider_name(),
            )
        if not np.all(np.isfinite(batch)):
            raise EmbeddingError(
                message="Embeddings contain non-finite values",
                provider_name=self.get_provider_name(),
            )

        async with self._write_lock:
            if self._matrix is not None and batch.shape[1] != self._matrix.shape[1]:
                raise EmbeddingError(
                    message=(
                        f"Embedding dimension {batch.shape[1]} does not match "
                        f"index dimension {self._matrix.shape[1]}"
                    ),
                    provider_name=self.get_provider_name(),
                )
            normalised = _normalise(batch)
            new_matrix = (
                normalised if self._matrix is None else np.vstack([self._matrix, normalised])
            )
            new_chunks = [*self._chunks, *chunks]
            self._matrix, self._chunks = new_matrix, new_chunks

        logger.info(
            "vector_store_add",
            added=len(chunks),
            total=len(new_chunks),
            dimension=int(batch.shape[1]),
        )
        return len(chunks)

    async def list_chunks(self, document_id: str | None = None) -> list[DocumentChunk]:
        chunks = self._chunks
        if document_id is None:
            return list(chunks)
        return [c for c in chunks if c.document_id == document_id]

    async def get_stats(self) -> CorpusStats:
        chunks = self._chunks
        return CorpusStats(
            total_chunks=len(chunks),
            total_documents=len({c.document_id for c in chunks}),
        )

    def get_provider_name(self) -> str:
        return "in_memory"

    def is_available(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._chunks)
