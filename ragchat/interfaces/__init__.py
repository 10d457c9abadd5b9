"""Interface definitions for every external collaborator.

Business logic talks only to these abstract base classes; concrete
adapters live in ``ragchat/providers/`` and are chosen in
``ragchat/main.py`` at startup.  Tests inject fakes through the same seams.

    Interface              →  Concrete implementations
    ───────────────────────────────────────────────────────────
    ILLMProvider           →  OpenAILLMProvider
    IEmbeddingProvider     →  OpenAIEmbeddingProvider,
                              SentenceTransformerEmbeddingProvider
    IVectorStoreProvider   →  InMemoryVectorStore
    ITextExtractor         →  DocumentTextExtractor
"""

from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import ILLMProvider
from ragchat.interfaces.text_extractor import ITextExtractor
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "ILLMProvider",
    "ITextExtractor",
    "IVectorStoreProvider",
]
