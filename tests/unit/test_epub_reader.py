# ABOUTME: Unit tests for reading bibliographic metadata back out of EPUB files.
# ABOUTME: Uses EPUBs written by ebooklib itself, plus minimal and corrupt files.

from pathlib import Path

import pytest
from ebooklib import epub

from bookdrop.formats.epub import EpubReadError, read_epub_metadata
from bookdrop.metadata.types import AUTHOR_NOT_FOUND, BookRecord


def _write_book(path: Path, *, isbn: str | None = None, with_author: bool = True) -> Path:
    book = epub.EpubBook()
    book.set_identifier("urn:uuid:0000-test")
    book.set_title("The Name of the Rose")
    book.set_language("en")
    if with_author:
        book.add_author("Umberto Eco")
        book.add_metadata("DC", "publisher", "Harcourt")
        book.add_metadata("DC", "description", "A mystery set in a medieval monastery.")
        book.add_metadata("DC", "date", "1983")
    if isbn:
        book.add_metadata("DC", "identifier", f"isbn:{isbn}")

    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)
    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    epub.write_epub(str(path), book)
    return path


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    return _write_book(tmp_path / "rose.epub", isbn="9780156001311")


@pytest.fixture
def minimal_epub(tmp_path: Path) -> Path:
    return _write_book(tmp_path / "minimal.epub", with_author=False)


class TestReadEpubMetadata:
    """Tests for EPUB metadata extraction."""

    def test_extracts_fields(self, sample_epub: Path) -> None:
        meta = read_epub_metadata(sample_epub)
        assert meta.title == "The Name of the Rose"
        assert meta.author == "Umberto Eco"
        assert meta.publisher == "Harcourt"
        assert meta.description == "A mystery set in a medieval monastery."
        assert meta.published_date == "1983"

    def test_extracts_prefixed_isbn(self, sample_epub: Path) -> None:
        """An 'isbn:'-prefixed identifier is recognised; the uuid is not."""
        assert read_epub_metadata(sample_epub).isbn == "9780156001311"

    def test_no_cover(self, sample_epub: Path) -> None:
        assert not read_epub_metadata(sample_epub).has_cover

    def test_source_is_epub(self, sample_epub: Path) -> None:
        meta = read_epub_metadata(sample_epub)
        assert isinstance(meta, BookRecord)
        assert meta.source == "epub"

    def test_minimal_epub_uses_placeholders(self, minimal_epub: Path) -> None:
        meta = read_epub_metadata(minimal_epub)
        assert meta.title == "The Name of the Rose"
        assert meta.author == AUTHOR_NOT_FOUND
        assert meta.isbn == ""

    def test_corrupt_epub_raises(self, tmp_path: Path) -> None:
        corrupt = tmp_path / "corrupt.epub"
        corrupt.write_text("this is not a valid epub file")
        with pytest.raises(EpubReadError):
            read_epub_metadata(corrupt)

    def test_nonexistent_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(EpubReadError, match="not found"):
            read_epub_metadata(tmp_path / "missing.epub")
