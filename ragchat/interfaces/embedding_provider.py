"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into fixed-length vectors.  The same
provider embeds chunks at ingestion time and questions at query time, so
similarity scores are only meaningful within one provider instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider              - OpenAI-compatible embeddings API
#   SentenceTransformerEmbeddingProvider - local HuggingFace model
# Located in: ragchat/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by ingestion and retrieval."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.  Implementations batch
            internally if the backend has a per-call limit.

        Returns
        -------
        list[list[float]]
            One vector per input, in input order, each of length
            :meth:`get_dimension`.

        Raises
        ------
        ragchat.utils.errors.EmbeddingError
            If the embedding call fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Embed one string, typically a search query."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the width of produced vectors."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (no network call)."""
