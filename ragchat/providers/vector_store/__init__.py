"""Vector store provider implementations.

InMemoryVectorStore keeps chunks and their normalised embeddings in
process memory and answers cosine-similarity queries with numpy.  To use a
persistent database instead, implement IVectorStoreProvider and select it
in main.py.
"""

from ragchat.providers.vector_store.memory_vector_store import InMemoryVectorStore

__all__ = ["InMemoryVectorStore"]
