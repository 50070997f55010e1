# ABOUTME: Google Books metadata provider implementation.
# ABOUTME: Looks a book up by ISBN via the volumes API and returns the first hit.

import logging
import re
from typing import Any

from bookdrop.metadata.http import HttpClient, MetadataFetchError, MetadataParseError
from bookdrop.metadata.types import PLACEHOLDER_COVER, UNKNOWN_AUTHOR, UNKNOWN_TITLE, BookRecord

logger = logging.getLogger(__name__)

_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"
SOURCE_NAME = "Google Books"

# Largest first; Google only includes the sizes it has.
_IMAGE_SIZES = ("extraLarge", "large", "thumbnail")


def parse_volumes_response(data: dict[str, Any], isbn: str) -> BookRecord | None:
    """Parse a Google Books volumes search response into a BookRecord.

    Only the first item is used. Returns None when totalItems is zero.
    """
    if not data.get("totalItems"):
        return None
    try:
        info = data["items"][0]["volumeInfo"]
        links = info.get("imageLinks") or {}
        cover = next((links[size] for size in _IMAGE_SIZES if links.get(size)), PLACEHOLDER_COVER)
        return BookRecord(
            isbn=isbn,
            title=info.get("title") or UNKNOWN_TITLE,
            subtitle=info.get("subtitle") or "",
            author=" & ".join(info.get("authors") or []) or UNKNOWN_AUTHOR,
            description=info.get("description") or "",
            publisher=info.get("publisher") or "",
            published_date=info.get("publishedDate") or "",
            cover_ref=cover,
            source=SOURCE_NAME,
        )
    except (KeyError, IndexError, AttributeError, TypeError) as exc:
        raise MetadataParseError(f"Unexpected Google Books volume shape: {exc}") from exc


class GoogleBooksProvider:
    """ISBN provider backed by the Google Books volumes API."""

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return SOURCE_NAME

    def lookup_isbn(self, isbn: str) -> BookRecord | None:
        clean_isbn = re.sub(r"[\s-]", "", isbn)
        logger.info("Attempting to get metadata from Google Books for ISBN: %s", clean_isbn)
        try:
            data = self._http.get(_VOLUMES_URL, params={"q": f"isbn:{clean_isbn}"})
            record = parse_volumes_response(data, clean_isbn)
        except MetadataFetchError as exc:
            logger.error("Google Books lookup failed for %s: %s", clean_isbn, exc)
            return None
        except MetadataParseError as exc:
            logger.warning("Google Books response unusable for %s: %s", clean_isbn, exc)
            return None

        if record is None:
            logger.warning("Google Books API: Book not found for ISBN %s.", clean_isbn)
            return None
        logger.info("Google Books success: Found book titled '%s'", record.title)
        return record
