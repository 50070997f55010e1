# ABOUTME: Shared pytest fixtures for bookdrop tests.
# ABOUTME: Provides sample records, cover images made with Pillow, settings, and a fake service graph.

import base64
import struct
import zlib
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from bookdrop.config import Settings
from bookdrop.core.services import Services, create_services
from bookdrop.metadata.types import BookRecord
from tests.fixtures.api_responses import (
    GOOGLE_VOLUMES_RESPONSE,
    HARDCOVER_SEARCH_RESPONSE,
    OL_BOOKS_RESPONSE,
    OL_SEARCH_RESPONSE,
)
from tests.fixtures.fake_http import FakeHttpClient

COVER_URL = "https://covers.openlibrary.org/b/id/240727-L.jpg"


def _image_bytes(fmt: str, mode: str = "RGB") -> bytes:
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    out = BytesIO()
    Image.new(mode, (12, 18), color).save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    """A small PNG with an alpha channel."""
    return _image_bytes("PNG", mode="RGBA")


@pytest.fixture
def bmp_bytes() -> bytes:
    """An image format that is never converted to JPEG."""
    return _image_bytes("BMP")


@pytest.fixture
def jpeg_data_uri(jpeg_bytes: bytes) -> str:
    return "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


@pytest.fixture
def oversized_png_bytes() -> bytes:
    """A PNG header claiming 30000x30000 pixels, over Pillow's decompression-bomb limit."""
    header = struct.pack(">IIBBBBB", 30000, 30000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )


@pytest.fixture
def sample_record() -> BookRecord:
    """A fully populated record as it comes out of ISBN consolidation."""
    return BookRecord(
        isbn="9780156001311",
        title="The Name of the Rose",
        author="Umberto Eco",
        description="A mystery set in a medieval monastery.",
        publisher="Harcourt",
        published_date="1983",
        cover_ref=COVER_URL,
        source="Open Library, Google Books",
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every file at a temporary directory."""
    return Settings(
        hardcover_token="Bearer test-token",
        gemini_api_key="test-key",
        epub_dir=tmp_path / "epubs",
        ledger_file=tmp_path / "processed_isbns.txt",
        debug_log_file=tmp_path / "debug.log",
    )


@pytest.fixture
def fake_http(jpeg_bytes: bytes) -> FakeHttpClient:
    """Upstream APIs that all know The Name of the Rose."""
    return FakeHttpClient(
        responses={
            "openlibrary.org/api/books": OL_BOOKS_RESPONSE,
            "openlibrary.org/search.json": OL_SEARCH_RESPONSE,
            "googleapis.com/books": GOOGLE_VOLUMES_RESPONSE,
            "hardcover.app": HARDCOVER_SEARCH_RESPONSE,
        },
        images={COVER_URL: jpeg_bytes},
    )


@pytest.fixture
def services(settings: Settings, fake_http: FakeHttpClient) -> Services:
    """The real service graph wired to the fake HTTP client."""
    return create_services(settings, http_client=fake_http)
