"""Abstract base class for document text extraction."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: DocumentTextExtractor (ragchat/providers/extraction/)
class ITextExtractor(ABC):
    """Contract for turning an uploaded binary document into page texts."""

    @abstractmethod
    async def extract(self, data: bytes, filename: str) -> list[str]:
        """Extract text from *data*, one string per page.

        Plain-text formats return a single page.  Pages with no text are
        returned as empty strings so page numbers stay aligned.

        Raises
        ------
        ragchat.utils.errors.ExtractionError
            If the document cannot be read.
        """

    @abstractmethod
    def supports(self, filename: str) -> bool:
        """Return ``True`` if *filename*'s format can be extracted."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this extractor."""
