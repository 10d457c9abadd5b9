"""Embedding provider implementations.

    1. OpenAIEmbeddingProvider - OpenAI-compatible API
       (``text-embedding-3-small`` via OpenRouter by default).
    2. SentenceTransformerEmbeddingProvider - local model, optional extra.

Only the API-backed provider is re-exported; the local provider is
imported where needed because its dependency may not be installed.
"""

from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
