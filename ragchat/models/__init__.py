"""ragchat domain models: re-exports all public model classes.

    - rag.py           - chunks, retrieval results, document records, corpus stats
    - conversation.py  - chat messages and roles
    - synthesis.py     - generation, answer, summary and status results
"""

from __future__ import annotations

from ragchat.models.conversation import ChatMessage, MessageRole
from ragchat.models.rag import (
    CorpusStats,
    DocumentChunk,
    DocumentRecord,
    IngestionResult,
    RetrievedChunk,
)
from ragchat.models.synthesis import (
    AnswerResult,
    AskResult,
    ChatResult,
    Completion,
    MemorySnapshot,
    SourceReference,
    SummaryResult,
    SystemStatus,
)

__all__ = [
    "AnswerResult",
    "AskResult",
    "ChatMessage",
    "ChatResult",
    "Completion",
    "CorpusStats",
    "DocumentChunk",
    "DocumentRecord",
    "IngestionResult",
    "MemorySnapshot",
    "MessageRole",
    "RetrievedChunk",
    "SourceReference",
    "SummaryResult",
    "SystemStatus",
]
