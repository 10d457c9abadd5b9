"""Similarity search over the ingested corpus.

Thin layer over :class:`IVectorStoreProvider` that validates arguments,
applies the embedding timeout and turns embedding failures into an empty
result.  A failed lookup must not block answering; the question is then
answered without document context.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from ragchat.utils.errors import RagChatError, ValidationError

if TYPE_CHECKING:
    from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
    from ragchat.models.rag import RetrievedChunk

logger = structlog.get_logger(logger_name=__name__)


class RetrievalService:
    """Finds the chunks most relevant to a query.

    Parameters
    ----------
    vector_store:
        The similarity index to query.
    timeout:
        Seconds allowed for embedding the query; ``None`` waits forever.
    """

    def __init__(self, vector_store: IVectorStoreProvider, timeout: float | None = None) -> None:
        self._vector_store = vector_store
        self._timeout = timeout

    async def search(self, query: str, k: int) -> list[RetrievedChunk]:
        """Return up to *k* chunks ordered by descending similarity.

        Returns an empty list for an empty index, and also when the
        query cannot be embedded (logged as ``retrieval_failed``).

        Raises
        ------
        ValidationError
            If *k* is not a positive integer or *query* is blank.
        """
        if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
            raise ValidationError(f"k must be a positive integer, got {k!r}")
        if not query or not query.strip():
            raise ValidationError("Query must not be empty")

        try:
            results = await asyncio.wait_for(
                self._vector_store.query(query, top_k=k),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("retrieval_failed", reason="timeout", timeout=self._timeout)
            return []
        except RagChatError as exc:
            logger.warning(
                "retrieval_failed",
                reason=type(exc).__name__,
                error=str(exc),
            )
            return []

        logger.debug("retrieval_complete", k=k, returned=len(results))
        return results
