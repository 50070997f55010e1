# ABOUTME: Unit tests for the EPUB package builder.
# ABOUTME: Checks filenames, rendered documents, escaping, cover handling, and archive layout.

import zipfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from bookdrop.core.covers import CoverAsset
from bookdrop.formats.epub import (
    EpubBuilder,
    EpubWriteError,
    author_sort_key,
    build_filename,
    publication_date,
    render_manifest,
    sanitize_filename_part,
)
from bookdrop.metadata.types import BookRecord

JPEG = CoverAsset(data=b"\xff\xd8\xff\xe0fake-jpeg", mime_type="image/jpeg")


class TestFilename:
    """Tests for output filename construction."""

    def test_sanitize(self) -> None:
        assert sanitize_filename_part("  My Book: A  Subtitle!! ") == "my-book-a-subtitle"
        assert sanitize_filename_part("--a -- b--") == "a-b"

    def test_example_filename(self) -> None:
        record = BookRecord(isbn="1234567890", title="My Book: A Subtitle", author="Jane Q. Public")
        assert build_filename(record) == "jane-q-public-my-book-a-subtitle-1234567890.epub"

    def test_subtitle_joined_before_truncation(self) -> None:
        record = BookRecord(
            isbn="1",
            title="An Extraordinarily Long Title",
            subtitle="With An Even Longer Subtitle",
            author="A",
        )
        assert build_filename(record) == "a-an-extraordinarily-long-title-with-an-ev-1.epub"

    def test_author_truncated_to_thirty(self) -> None:
        record = BookRecord(isbn="1", title="T", author="Bartholomew Maximilian Fitzgerald-Worthington")
        assert build_filename(record).startswith("bartholomew-maximilian-fitzger-t-")

    def test_empty_parts_get_fallbacks(self) -> None:
        record = BookRecord(isbn="", title="!!!", author="???")
        assert build_filename(record) == "unknown-author-untitled-no-isbn.epub"


class TestMetadataHelpers:
    def test_sort_key_last_first(self) -> None:
        assert author_sort_key("Jane Q. Public") == "Public, Jane Q."

    def test_sort_key_uses_primary_author(self) -> None:
        assert author_sort_key("Terry Pratchett & Neil Gaiman") == "Pratchett, Terry"

    def test_sort_key_single_name(self) -> None:
        assert author_sort_key("Plato") == "Plato"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2014-03-11T00:00:00Z", "2014-03-11"),
            ("1983", "1983"),
            ("", "2024-01-01"),
            ("N/A", "2024-01-01"),
            ("83", "2024-01-01"),
        ],
    )
    def test_publication_date(self, raw: str, expected: str) -> None:
        assert publication_date(raw) == expected


class TestRenderManifest:
    """Tests for the rendered documents."""

    def test_package_document_fields(self, sample_record: BookRecord) -> None:
        manifest = render_manifest(
            sample_record,
            JPEG,
            uid="urn:uuid:1234",
            modified=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )
        opf = manifest.content_opf
        assert '<dc:identifier id="BookId">urn:uuid:1234</dc:identifier>' in opf
        assert '<dc:identifier opf:scheme="ISBN">9780156001311</dc:identifier>' in opf
        assert "<dc:identifier>isbn:9780156001311</dc:identifier>" in opf
        assert 'opf:file-as="Eco, Umberto"' in opf
        assert "<dc:language>en</dc:language>" in opf
        assert "<dc:date opf:event=\"publication\">1983</dc:date>" in opf
        assert "2024-05-01T12:00:00Z" in opf
        assert '<meta name="cover" content="cover-image"/>' in opf
        assert 'properties="cover-image"' in opf

    def test_subtitle_refinement(self) -> None:
        record = BookRecord(title="Dune", subtitle="Book One", author="Frank Herbert")
        opf = render_manifest(record).content_opf
        assert '<dc:title id="title">Dune: Book One</dc:title>' in opf
        assert '<meta property="title-type" refines="#title">subtitle</meta>' in opf
        assert "Book One</meta>" in opf

    def test_no_subtitle_no_refinement(self, sample_record: BookRecord) -> None:
        assert "title-type" not in render_manifest(sample_record).content_opf

    def test_no_cover_entries_without_asset(self, sample_record: BookRecord) -> None:
        manifest = render_manifest(sample_record)
        assert "cover-image" not in manifest.content_opf
        assert "NO COVER IMAGE AVAILABLE" in manifest.titlepage_xhtml
        assert "<img" not in manifest.titlepage_xhtml
        assert all(not name.endswith("cover.jpeg") for name, _ in manifest.entries())

    def test_cover_on_title_page(self, sample_record: BookRecord) -> None:
        manifest = render_manifest(sample_record, JPEG)
        assert '<img src="cover.jpeg"' in manifest.titlepage_xhtml
        assert "NO COVER IMAGE AVAILABLE" not in manifest.titlepage_xhtml

    def test_user_text_is_escaped(self) -> None:
        record = BookRecord(
            title="Fish & Chips <Deluxe>",
            author='O"Brien & Sons',
            description="Line one\nLine <two>",
        )
        manifest = render_manifest(record)
        assert "Fish &amp; Chips &lt;Deluxe&gt;" in manifest.content_opf
        assert "<Deluxe>" not in manifest.titlepage_xhtml
        assert "Line one<br/>Line &lt;two&gt;" in manifest.titlepage_xhtml

    def test_ncx_single_entry(self, sample_record: BookRecord) -> None:
        manifest = render_manifest(sample_record, uid="urn:uuid:abc")
        assert 'playOrder="1"' in manifest.toc_ncx
        assert manifest.toc_ncx.count("<navPoint") == 1
        assert 'content="urn:uuid:abc"' in manifest.toc_ncx

    def test_nav_points_at_title_page(self, sample_record: BookRecord) -> None:
        assert 'href="titlepage.xhtml"' in render_manifest(sample_record).nav_xhtml

    def test_container_points_at_package(self, sample_record: BookRecord) -> None:
        assert 'full-path="OEBPS/content.opf"' in render_manifest(sample_record).container_xml


class TestEpubBuilder:
    """Tests for writing the archive."""

    def test_mimetype_first_and_stored(self, tmp_path: Path, sample_record: BookRecord) -> None:
        path = EpubBuilder(tmp_path).build(sample_record, JPEG)
        with zipfile.ZipFile(path) as zf:
            first = zf.infolist()[0]
            assert first.filename == "mimetype"
            assert first.compress_type == zipfile.ZIP_STORED
            assert zf.read("mimetype") == b"application/epub+zip"

    def test_entries_under_oebps(self, tmp_path: Path, sample_record: BookRecord) -> None:
        path = EpubBuilder(tmp_path).build(sample_record, JPEG)
        with zipfile.ZipFile(path) as zf:
            names = zf.namelist()
        assert set(names) == {
            "mimetype",
            "META-INF/container.xml",
            "OEBPS/content.opf",
            "OEBPS/toc.ncx",
            "OEBPS/titlepage.xhtml",
            "OEBPS/nav.xhtml",
            "OEBPS/cover.jpeg",
        }

    def test_cover_bytes_embedded(self, tmp_path: Path, sample_record: BookRecord) -> None:
        path = EpubBuilder(tmp_path).build(sample_record, JPEG)
        with zipfile.ZipFile(path) as zf:
            assert zf.read("OEBPS/cover.jpeg") == JPEG.data

    def test_output_dir_created(self, tmp_path: Path, sample_record: BookRecord) -> None:
        out = tmp_path / "nested" / "epubs"
        path = EpubBuilder(out).build(sample_record)
        assert path.parent == out
        assert path.name == "umberto-eco-the-name-of-the-rose-9780156001311.epub"

    def test_rebuild_overwrites(self, tmp_path: Path, sample_record: BookRecord) -> None:
        """Building the same record twice writes the same path without error."""
        builder = EpubBuilder(tmp_path)
        first = builder.build(sample_record, JPEG)
        second = builder.build(sample_record)
        assert first == second
        with zipfile.ZipFile(second) as zf:
            assert "OEBPS/cover.jpeg" not in zf.namelist()

    def test_unwritable_dir_raises(self, tmp_path: Path, sample_record: BookRecord) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        with pytest.raises(EpubWriteError):
            EpubBuilder(blocker / "epubs").build(sample_record)

    def test_archive_failure_raises(self, tmp_path: Path, sample_record: BookRecord) -> None:
        with patch("bookdrop.formats.epub.zipfile.ZipFile", side_effect=OSError("disk full")):
            with pytest.raises(EpubWriteError, match="disk full"):
                EpubBuilder(tmp_path).build(sample_record)
