"""Text chunking with overlapping character windows.

Splits extracted document text into :class:`~ragchat.models.rag.DocumentChunk`
objects of at most ``chunk_size`` characters (default 1000), with
consecutive chunks sharing at least ``chunk_overlap`` characters (default
200).

The window algorithm, per page:

1. Take ``text[start : start + chunk_size]``.
2. If the window does not reach the end of the page, pull its end back to
   the last paragraph break, line break, sentence end or space, whichever
   comes first in that order of preference, provided the window keeps at
   least half its length.  Without such a boundary the hard cut stands.
3. Start the next window ``chunk_overlap`` characters before the end of
   this one, moved back a little further to the start of a word when one
   is close.

So a concept spanning a boundary appears whole in at least one chunk, and
text with no separators at all (e.g. ``"A" * 2500``) is cut at
``[0, 1000)``, ``[800, 1800)``, ``[1600, 2500)``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog

from ragchat.models.rag import DocumentChunk
from ragchat.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

# Preferred window boundaries, strongest first.
_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", " ")


class TextChunker:
    """Splits text into overlapping, boundary-aware character windows.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk (default 1000).
    chunk_overlap:
        Minimum characters shared by consecutive chunks of one page
        (default 200).  Must be smaller than *chunk_size*.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        if chunk_size <= 0:
            raise ConfigurationError("chunk_size must be positive")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ConfigurationError(
                f"chunk_overlap ({chunk_overlap}) must be >= 0 and smaller than "
                f"chunk_size ({chunk_size})"
            )
        self._chunk_size = chunk_size
        self._overlap = chunk_overlap
        # Soft boundaries are only taken past this point in a window.
        self._min_window = max(chunk_overlap + 1, chunk_size // 2)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def split(self, text: str) -> list[str]:
        """Return the window texts for *text*, dropping whitespace-only windows."""
        return [text[s:e] for s, e in self._windows(text) if text[s:e].strip()]

    def chunk_pages(
        self,
        pages: list[str],
        document_id: str,
        filename: str,
        paged: bool = True,
    ) -> list[DocumentChunk]:
        """Split every page and tag the resulting windows as chunks.

        Parameters
        ----------
        pages:
            Page texts in document order.  Windows never span pages.
        document_id:
            Identifier of the owning document, copied onto every chunk.
        filename:
            Source filename, copied onto every chunk for attribution.
        paged:
            When true, chunks record their 1-based page number.

        Returns
        -------
        list[DocumentChunk]
            Chunks in document order, with ``chunk_index`` counting across
            pages.  Empty or whitespace-only input yields an empty list.
        """
        created_at = datetime.now(tz=timezone.utc)
        chunks: list[DocumentChunk] = []
        for page_number, page_text in enumerate(pages, start=1):
            if not page_text or not page_text.strip():
                continue
            for window in self.split(page_text):
                chunks.append(
                    DocumentChunk(
                        chunk_id=str(uuid.uuid4()),
                        document_id=document_id,
                        filename=filename,
                        text=window,
                        chunk_index=len(chunks),
                        page_number=page_number if paged else None,
                        created_at=created_at,
                    )
                )

        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            pages=len(pages),
            document_id=document_id,
        )
        return chunks

    # ------------------------------------------------------------------
    # Window computation
    # ------------------------------------------------------------------

    def _windows(self, text: str) -> list[tuple[int, int]]:
        length = len(text)
        windows: list[tuple[int, int]] = []
        start = 0
        while start < length:
            end = min(start + self._chunk_size, length)
            if end < length:
                end = self._soft_end(text, start, end)
            windows.append((start, end))
            if end >= length:
                break
            next_start = self._word_start(text, end - self._overlap)
            start = max(next_start, start + 1)
        return windows

    def _soft_end(self, text: str, start: int, hard_end: int) -> int:
        floor = start + self._min_window
        for separator in _SEPARATORS:
            pos = text.rfind(separator, floor, hard_end)
            if pos != -1:
                return pos + len(separator)
        return hard_end

    def _word_start(self, text: str, position: int) -> int:
        """Move *position* back to the start of its word, at most overlap // 2 chars."""
        if position <= 0 or text[position - 1].isspace():
            return max(position, 0)
        limit = max(position - self._overlap // 2, 0)
        for i in range(position - 1, limit - 1, -1):
            if text[i].isspace():
                return i + 1
        return position
