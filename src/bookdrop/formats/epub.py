# ABOUTME: EPUB packaging for placeholder books, plus an ebooklib-based metadata reader.
# ABOUTME: Renders the package, navigation, and title-page documents and zips them in EPUB order.

import logging
import re
import uuid
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

import ebooklib
from ebooklib import epub
from jinja2 import Environment, FileSystemLoader

from bookdrop.core.covers import CoverAsset
from bookdrop.metadata.types import BookRecord, is_placeholder

logger = logging.getLogger(__name__)

EPUB_MIMETYPE = b"application/epub+zip"
CONTENT_DIR = "OEBPS"
PACKAGE_PATH = f"{CONTENT_DIR}/content.opf"
COVER_FILENAME = "cover.jpeg"
COVER_MEDIA_TYPE = "image/jpeg"
LANGUAGE = "en"
DEFAULT_PUBLICATION_DATE = "2024-01-01"

_TITLE_PART_MAX = 40
_AUTHOR_PART_MAX = 30

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


class EpubWriteError(Exception):
    """Raised when the output directory or archive cannot be created."""


@lru_cache(maxsize=1)
def _template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _render(template_name: str, **context: object) -> str:
    return _template_env().get_template(template_name).render(**context)


def sanitize_filename_part(value: str) -> str:
    """Reduce a string to lowercase letters, digits, and single hyphens."""
    value = re.sub(r"[^a-zA-Z0-9\s-]", "", value)
    value = re.sub(r"[\s-]+", "-", value)
    return value.strip("-").lower()


def build_filename(record: BookRecord) -> str:
    """Build the output filename: {author}-{title[-subtitle]}-{isbn}.epub.

    The title part (subtitle included) is cut to 40 characters and the author
    part to 30.
    """
    isbn_part = sanitize_filename_part(record.isbn) or "no-isbn"
    title_part = sanitize_filename_part(record.title) or "untitled"
    author_part = sanitize_filename_part(record.author) or "unknown-author"

    subtitle_part = sanitize_filename_part(record.subtitle)
    if subtitle_part:
        title_part = f"{title_part}-{subtitle_part}"

    title_part = title_part[:_TITLE_PART_MAX]
    author_part = author_part[:_AUTHOR_PART_MAX]
    return f"{author_part}-{title_part}-{isbn_part}.epub"


def author_sort_key(author: str) -> str:
    """Compute a "Last, First" sort key from the primary author.

    Only the first of several " & "-joined authors is used. Single-word names
    are returned unchanged.
    """
    primary = author.split(" & ")[0].strip()
    parts = primary.split()
    if len(parts) > 1:
        return f"{parts[-1]}, {' '.join(parts[:-1])}"
    return primary


def publication_date(published_date: str) -> str:
    """First ten characters of the published date, or a fixed default."""
    if is_placeholder(published_date) or len(published_date.strip()) < 4:
        return DEFAULT_PUBLICATION_DATE
    return published_date.strip()[:10]


def full_title(record: BookRecord) -> str:
    if record.subtitle:
        return f"{record.title}: {record.subtitle}"
    return record.title


@dataclass(frozen=True)
class PackageManifest:
    """The archive entries of one EPUB, in write order after the mimetype."""

    container_xml: str
    content_opf: str
    toc_ncx: str
    titlepage_xhtml: str
    nav_xhtml: str
    cover: bytes | None = None

    def entries(self) -> list[tuple[str, bytes]]:
        items = [
            ("META-INF/container.xml", self.container_xml.encode("utf-8")),
            (PACKAGE_PATH, self.content_opf.encode("utf-8")),
            (f"{CONTENT_DIR}/toc.ncx", self.toc_ncx.encode("utf-8")),
            (f"{CONTENT_DIR}/titlepage.xhtml", self.titlepage_xhtml.encode("utf-8")),
        ]
        if self.cover is not None:
            items.append((f"{CONTENT_DIR}/{COVER_FILENAME}", self.cover))
        items.append((f"{CONTENT_DIR}/nav.xhtml", self.nav_xhtml.encode("utf-8")))
        return items


def render_manifest(
    record: BookRecord,
    cover: CoverAsset | None = None,
    *,
    uid: str | None = None,
    modified: datetime | None = None,
) -> PackageManifest:
    """Render every document of the container for a record and optional cover.

    The cover is expected to be JPEG already; callers filter out anything else.
    """
    cover_href = COVER_FILENAME if cover is not None else None
    context = {
        "record": record,
        "uid": uid or f"urn:uuid:{uuid.uuid4()}",
        "full_title": full_title(record),
        "file_as": author_sort_key(record.author),
        "language": LANGUAGE,
        "publication_date": publication_date(record.published_date),
        "modified": (modified or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "cover_href": cover_href,
        "cover_media_type": COVER_MEDIA_TYPE,
        "package_path": PACKAGE_PATH,
    }
    return PackageManifest(
        container_xml=_render("container.xml", **context),
        content_opf=_render("content.opf", **context),
        toc_ncx=_render("toc.ncx", **context),
        titlepage_xhtml=_render("titlepage.xhtml", **context),
        nav_xhtml=_render("nav.xhtml", **context),
        cover=cover.data if cover is not None else None,
    )


def write_archive(path: Path, manifest: PackageManifest) -> None:
    """Zip a manifest to path with the mimetype entry first and uncompressed.

    An existing file at path is overwritten. The write is not atomic.

    Raises:
        EpubWriteError: If the archive cannot be opened or written.
    """
    try:
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("mimetype", EPUB_MIMETYPE, compress_type=zipfile.ZIP_STORED)
            for name, data in manifest.entries():
                zf.writestr(name, data)
    except (OSError, RuntimeError) as exc:
        raise EpubWriteError(f"Cannot create ZIP archive at {path}: {exc}") from exc


class EpubBuilder:
    """Packages confirmed records into placeholder EPUB files in one directory."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, record: BookRecord) -> Path:
        return self._output_dir / build_filename(record)

    def build(self, record: BookRecord, cover: CoverAsset | None = None) -> Path:
        """Write the EPUB for a record and return its path.

        Raises:
            EpubWriteError: If the output directory or the archive cannot be created.
        """
        if not self._output_dir.is_dir():
            try:
                self._output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.critical("Failed to create EPUB directory: %s", self._output_dir)
                raise EpubWriteError(
                    f"Failed to create EPUB directory {self._output_dir}: {exc}"
                ) from exc
            logger.info("Created EPUB directory: %s", self._output_dir)

        path = self.path_for(record)
        logger.info("Starting EPUB creation for %s into %s", record.title, path)
        try:
            write_archive(path, render_manifest(record, cover))
        except EpubWriteError:
            logger.critical("Cannot create ZIP archive at %s", path)
            raise
        logger.info("EPUB file successfully created at %s", path)
        return path


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _detect_isbn(book: epub.EpubBook) -> str | None:
    """Find the ISBN among the dc:identifier entries."""
    for value, attrs in book.get_metadata("DC", "identifier"):
        if not value:
            continue
        scheme = attrs.get("opf:scheme", attrs.get("scheme", attrs.get(
            "{http://www.idpf.org/2007/opf}scheme", ""
        )))
        if scheme.lower() == "isbn":
            return str(value).strip()
        if str(value).startswith("isbn:"):
            return str(value).removeprefix("isbn:").strip()
    return None


def _has_cover_image(book: epub.EpubBook) -> bool:
    """Whether the EPUB carries an image item for its cover."""
    for item in book.get_items_of_type(ebooklib.ITEM_COVER):
        if item.get_content():
            return True
    for item in book.get_items_of_type(ebooklib.ITEM_IMAGE):
        if "cover" in (item.get_name() or "").lower():
            return True
    return False


def read_epub_metadata(path: Path) -> BookRecord:
    """Read the bibliographic metadata back out of an EPUB file.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    title = _get_metadata_value(book, "DC", "title") or path.stem
    creators = book.get_metadata("DC", "creator")
    author = str(creators[0][0]).strip() if creators and creators[0][0] else ""

    return BookRecord(
        isbn=_detect_isbn(book) or "",
        title=title,
        author=author,
        description=_get_metadata_value(book, "DC", "description") or "",
        publisher=_get_metadata_value(book, "DC", "publisher") or "",
        published_date=_get_metadata_value(book, "DC", "date") or "",
        cover_ref=COVER_FILENAME if _has_cover_image(book) else "",
        source="epub",
    ).with_placeholders()
