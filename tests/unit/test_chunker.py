"""Unit tests for TextChunker window computation and chunk tagging."""

from __future__ import annotations

import pytest

from ragchat.services.ingestion.chunker import TextChunker
from ragchat.utils.errors import ConfigurationError


def _overlap(a: str, b: str) -> int:
    """Length of the longest suffix of *a* that is a prefix of *b*."""
    for size in range(min(len(a), len(b)), 0, -1):
        if a.endswith(b[:size]):
            return size
    return 0


class TestWindows:
    def test_uniform_text_yields_three_chunks(self) -> None:
        chunker = TextChunker(chunk_size=1000, chunk_overlap=200)
        pieces = chunker.split("A" * 2500)

        assert len(pieces) == 3
        assert [len(p) for p in pieces] == [1000, 1000, 900]

    def test_uniform_text_window_offsets(self) -> None:
        chunker = TextChunker(chunk_size=1000, chunk_overlap=200)
        assert chunker._windows("A" * 2500) == [(0, 1000), (800, 1800), (1600, 2500)]

    def test_short_text_is_single_chunk(self) -> None:
        chunker = TextChunker(chunk_size=1000, chunk_overlap=200)
        assert chunker.split("hello world") == ["hello world"]

    def test_exact_size_text_is_single_chunk(self) -> None:
        chunker = TextChunker(chunk_size=100, chunk_overlap=20)
        assert chunker.split("x" * 100) == ["x" * 100]

    def test_empty_and_whitespace_text(self) -> None:
        chunker = TextChunker()
        assert chunker.split("") == []
        assert chunker.split("   \n\n  ") == []

    def test_prose_respects_size_and_overlap(self) -> None:
        sentence = "The quick brown fox jumps over the lazy dog. "
        text = sentence * 120
        chunker = TextChunker(chunk_size=300, chunk_overlap=60)
        pieces = chunker.split(text)

        assert len(pieces) > 1
        assert all(len(p) <= 300 for p in pieces)
        for previous, current in zip(pieces, pieces[1:]):
            assert _overlap(previous, current) >= 60

    def test_prefers_paragraph_boundary(self) -> None:
        first = "a" * 70
        second = "b" * 70
        chunker = TextChunker(chunk_size=100, chunk_overlap=10)
        pieces = chunker.split(f"{first}\n\n{second}")

        assert pieces[0] == f"{first}\n\n"

    def test_next_window_starts_on_word(self) -> None:
        words = " ".join(["word"] * 100)
        chunker = TextChunker(chunk_size=100, chunk_overlap=20)
        pieces = chunker.split(words)

        for piece in pieces[1:]:
            assert piece.startswith("word")

    def test_chunks_preserve_order_and_cover_text(self) -> None:
        text = "".join(chr(ord("a") + i % 26) for i in range(3000))
        chunker = TextChunker(chunk_size=500, chunk_overlap=100)
        windows = chunker._windows(text)

        assert windows[0][0] == 0
        assert windows[-1][1] == len(text)
        for (s1, e1), (s2, e2) in zip(windows, windows[1:]):
            assert s1 < s2 < e1 <= e2


class TestConfiguration:
    @pytest.mark.parametrize("size,overlap", [(100, 100), (100, 150), (0, 0), (100, -1)])
    def test_invalid_settings_raise(self, size: int, overlap: int) -> None:
        with pytest.raises(ConfigurationError):
            TextChunker(chunk_size=size, chunk_overlap=overlap)

    def test_properties(self) -> None:
        chunker = TextChunker(chunk_size=800, chunk_overlap=100)
        assert chunker.chunk_size == 800
        assert chunker.chunk_overlap == 100


class TestChunkPages:
    def test_tags_chunks_with_document_and_page(self) -> None:
        chunker = TextChunker(chunk_size=1000, chunk_overlap=200)
        chunks = chunker.chunk_pages(["A" * 1500, "", "B" * 10], "doc-9", "book.pdf")

        assert [c.chunk_index for c in chunks] == [0, 1, 2]
        assert [c.page_number for c in chunks] == [1, 1, 3]
        assert {c.document_id for c in chunks} == {"doc-9"}
        assert {c.filename for c in chunks} == {"book.pdf"}
        assert len({c.chunk_id for c in chunks}) == 3

    def test_unpaged_chunks_have_no_page(self) -> None:
        chunker = TextChunker()
        chunks = chunker.chunk_pages(["hello"], "doc-1", "notes.txt", paged=False)

        assert len(chunks) == 1
        assert chunks[0].page_number is None

    def test_blank_pages_only(self) -> None:
        chunker = TextChunker()
        assert chunker.chunk_pages(["", "  "], "doc-1", "blank.txt") == []
