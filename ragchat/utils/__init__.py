"""Utility modules for ragchat.

- **errors** -- exception hierarchy rooted at RagChatError; the API layer
  maps each subclass to an HTTP status.
- **logging** -- structlog setup with console output in development and
  JSON in production.
- **concurrency** -- per-key asyncio locks and the generation semaphore.
"""

from ragchat.utils.concurrency import KeyedLock, generation_semaphore
from ragchat.utils.errors import (
    ConfigurationError,
    EmbeddingError,
    ExtractionError,
    GenerationError,
    LLMError,
    NotFoundError,
    RagChatError,
    UnavailableError,
    ValidationError,
)
from ragchat.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "EmbeddingError",
    "ExtractionError",
    "GenerationError",
    "KeyedLock",
    "LLMError",
    "NotFoundError",
    "RagChatError",
    "UnavailableError",
    "ValidationError",
    "configure_logging",
    "generation_semaphore",
    "get_logger",
]
