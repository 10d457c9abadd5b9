"""Unit tests for DocumentTextExtractor."""

from __future__ import annotations

import fitz
import pytest

from ragchat.providers.extraction.document_text_extractor import DocumentTextExtractor
from ragchat.utils.errors import ExtractionError


def _pdf_bytes(page_texts: list[str]) -> bytes:
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def extractor() -> DocumentTextExtractor:
    return DocumentTextExtractor()


class TestPdfExtraction:
    @pytest.mark.asyncio
    async def test_one_string_per_page(self, extractor: DocumentTextExtractor) -> None:
        data = _pdf_bytes(["First page text", "Second page text"])

        pages = await extractor.extract(data, "report.pdf")

        assert len(pages) == 2
        assert "First page text" in pages[0]
        assert "Second page text" in pages[1]

    @pytest.mark.asyncio
    async def test_blank_page_kept_as_empty(self, extractor: DocumentTextExtractor) -> None:
        pages = await extractor.extract(_pdf_bytes(["Has text", ""]), "mixed.pdf")
        assert pages[1] == ""

    @pytest.mark.asyncio
    async def test_detected_by_magic_bytes(self, extractor: DocumentTextExtractor) -> None:
        pages = await extractor.extract(_pdf_bytes(["Hidden pdf"]), "upload.bin")
        assert "Hidden pdf" in pages[0]

    @pytest.mark.asyncio
    async def test_corrupt_pdf(self, extractor: DocumentTextExtractor) -> None:
        with pytest.raises(ExtractionError):
            await extractor.extract(b"this is not really a pdf", "broken.pdf")


class TestTextExtraction:
    @pytest.mark.asyncio
    async def test_utf8_text_is_single_page(self, extractor: DocumentTextExtractor) -> None:
        pages = await extractor.extract("Café notes".encode("utf-8"), "notes.txt")
        assert pages == ["Café notes"]

    @pytest.mark.asyncio
    async def test_bom_stripped(self, extractor: DocumentTextExtractor) -> None:
        pages = await extractor.extract(b"\xef\xbb\xbfhello", "bom.md")
        assert pages == ["hello"]

    @pytest.mark.asyncio
    async def test_latin1_fallback(self, extractor: DocumentTextExtractor) -> None:
        pages = await extractor.extract("Café".encode("latin-1"), "legacy.csv")
        assert pages == ["Café"]

    @pytest.mark.asyncio
    async def test_unsupported_type(self, extractor: DocumentTextExtractor) -> None:
        with pytest.raises(ExtractionError):
            await extractor.extract(b"\x00\x01", "image.png")

    @pytest.mark.asyncio
    async def test_empty_upload(self, extractor: DocumentTextExtractor) -> None:
        with pytest.raises(ExtractionError):
            await extractor.extract(b"", "empty.txt")


class TestSupports:
    @pytest.mark.parametrize("name", ["a.pdf", "b.TXT", "c.md", "README", "d.json"])
    def test_supported(self, extractor: DocumentTextExtractor, name: str) -> None:
        assert extractor.supports(name) is True

    @pytest.mark.parametrize("name", ["a.png", "b.docx", "c.exe"])
    def test_unsupported(self, extractor: DocumentTextExtractor, name: str) -> None:
        assert extractor.supports(name) is False
