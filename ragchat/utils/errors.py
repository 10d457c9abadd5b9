"""Custom exception hierarchy for ragchat.

All application exceptions inherit from :class:`RagChatError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "openai", "pymupdf") caused the failure.

The hierarchy is organized by how the request layer reports each failure:

    RagChatError  (base -- catch-all for any ragchat error)
    +-- ValidationError      (missing or malformed input)
    +-- UnavailableError     (required collaborator not configured)
    +-- ExtractionError      (no readable text in an uploaded document)
    +-- NotFoundError        (unknown document, or a document with no chunks)
    +-- GenerationError      (summarization generation failed or timed out)
    +-- LLMError             (any LLM API call failure)
    +-- EmbeddingError       (embedding call failure or dimension mismatch)
    +-- ConfigurationError   (invalid settings)

Validation and not-found errors are surfaced immediately and never
retried.  Generation failures during ask/chat are absorbed into a degraded
answer by the synthesizer; summarization surfaces them as
:class:`GenerationError`.
"""


class RagChatError(Exception):
    """Base exception for all ragchat errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[openai-compatible] API error: ...``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Caller errors
# ---------------------------------------------------------------------------

class ValidationError(RagChatError):
    """Raised when a request is missing required input or is malformed."""

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(RagChatError):
    """Raised when a referenced document is unknown or has no stored chunks."""

    def __init__(
        self,
        message: str = "Document not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(RagChatError):
    """Raised when an uploaded document yields no readable text."""

    def __init__(
        self,
        message: str = "No readable content",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------

class UnavailableError(RagChatError):
    """Raised when an operation needs a collaborator that is not configured.

    The request layer reports this as "system not ready" (HTTP 503).
    """

    def __init__(
        self,
        message: str = "System not ready",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(RagChatError):
    """Raised when an LLM API call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class GenerationError(RagChatError):
    """Raised when summarization cannot produce a summary."""

    def __init__(
        self,
        message: str = "Summary generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(RagChatError):
    """Raised when an embedding call fails or returns mismatched vectors."""

    def __init__(
        self,
        message: str = "Embedding operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(RagChatError):
    """Raised when configuration is invalid or inconsistent."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
