"""Text extraction for uploaded documents.

PDFs are read with PyMuPDF (``fitz``) page by page; plain-text formats are
decoded as UTF-8 (falling back to Latin-1) and returned as a single page.
PyMuPDF is synchronous, so extraction runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from pathlib import PurePath

import fitz  # PyMuPDF
import structlog

from ragchat.interfaces.text_extractor import ITextExtractor
from ragchat.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

_PDF_SUFFIXES = frozenset({".pdf"})
_TEXT_SUFFIXES = frozenset({".txt", ".md", ".markdown", ".csv", ".json", ".html", ".htm", ".rst", ""})


class DocumentTextExtractor(ITextExtractor):
    """Extracts per-page text from PDF and plain-text uploads."""

    async def extract(self, data: bytes, filename: str) -> list[str]:
        if not data:
            raise ExtractionError("Uploaded file is empty", provider_name=self.get_provider_name())

        if self._is_pdf(data, filename):
            pages = await asyncio.to_thread(self._extract_pdf_pages, data, filename)
        elif self.supports(filename):
            pages = [self._decode_text(data)]
        else:
            raise ExtractionError(
                f"Unsupported file type: {PurePath(filename).suffix or filename}",
                provider_name=self.get_provider_name(),
            )

        logger.debug(
            "text_extracted",
            filename=filename,
            pages=len(pages),
            characters=sum(len(p) for p in pages),
        )
        return pages

    def supports(self, filename: str) -> bool:
        suffix = PurePath(filename).suffix.lower()
        return suffix in _PDF_SUFFIXES or suffix in _TEXT_SUFFIXES

    def get_provider_name(self) -> str:
        return "pymupdf"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_pdf(data: bytes, filename: str) -> bool:
        return data[:5] == b"%PDF-" or PurePath(filename).suffix.lower() in _PDF_SUFFIXES

    def _extract_pdf_pages(self, data: bytes, filename: str) -> list[str]:
        """Return one text string per PDF page; pages without text are empty."""
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            logger.error("pdf_open_failed", filename=filename, error=str(exc))
            raise ExtractionError(
                f"Could not read PDF '{filename}'",
                provider_name=self.get_provider_name(),
            ) from exc

        pages: list[str] = []
        try:
            for page in doc:
                pages.append(page.get_text("text").strip())
        finally:
            doc.close()

        if not any(pages):
            logger.warning("pdf_no_text_extracted", filename=filename, pages=len(pages))
        return pages

    @staticmethod
    def _decode_text(data: bytes) -> str:
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError:
            return data.decode("latin-1")
