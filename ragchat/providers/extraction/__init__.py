"""Text extraction providers (PDF via PyMuPDF, plain text via decoding)."""

from ragchat.providers.extraction.document_text_extractor import DocumentTextExtractor

__all__ = ["DocumentTextExtractor"]
