# ABOUTME: Open Library metadata provider implementation.
# ABOUTME: Looks books up on openlibrary.org by ISBN (Books API) or title/author (Search API).

import logging
import re

from bookdrop.metadata.http import HttpClient, MetadataFetchError, MetadataParseError
from bookdrop.metadata.openlibrary_parser import (
    SOURCE_NAME,
    parse_books_response,
    parse_search_results,
)
from bookdrop.metadata.types import BookRecord

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"
SEARCH_LIMIT = 3


class OpenLibraryProvider:
    """Metadata provider backed by the Open Library API.

    Serves both as an ISBN source (the primary one) and as a title/author
    search source. Uses a dependency-injected HttpClient for testability.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return SOURCE_NAME

    def lookup_isbn(self, isbn: str) -> BookRecord | None:
        """Look up a book by ISBN via the Books API.

        Returns None when Open Library has no record or cannot be reached.
        """
        clean_isbn = re.sub(r"[\s-]", "", isbn)
        logger.info("Attempting to get metadata from Open Library for ISBN: %s", clean_isbn)
        params = {"bibkeys": f"ISBN:{clean_isbn}", "jscmd": "data", "format": "json"}
        try:
            data = self._http.get(f"{_OL_BASE}/api/books", params=params)
            record = parse_books_response(data, clean_isbn)
        except MetadataFetchError as exc:
            logger.error("Open Library ISBN lookup failed for %s: %s", clean_isbn, exc)
            return None
        except MetadataParseError as exc:
            logger.warning("Open Library ISBN response unusable for %s: %s", clean_isbn, exc)
            return None

        if record is None:
            logger.warning("Open Library API: Book not found for ISBN %s.", clean_isbn)
            return None
        logger.info("Open Library success: Found book titled '%s'", record.title)
        return record

    def search(self, title: str, author: str) -> list[BookRecord]:
        """Search Open Library by title and author.

        Returns at most SEARCH_LIMIT records in Open Library's relevance order.
        """
        logger.info(
            "Attempting to get metadata from Open Library for title: %s, author: %s",
            title,
            author,
        )
        params = {"title": title, "author": author, "limit": str(SEARCH_LIMIT)}
        try:
            data = self._http.get(f"{_OL_BASE}/search.json", params=params)
            results = parse_search_results(data, SEARCH_LIMIT)
        except MetadataFetchError as exc:
            logger.error("Open Library search failed for title=%s author=%s: %s", title, author, exc)
            return []
        except MetadataParseError as exc:
            logger.warning("Open Library search response unusable: %s", exc)
            return []

        if not results:
            logger.warning("Open Library API: Book not found for title/author.")
            return []
        logger.info("Open Library success: Found %d book(s).", len(results))
        return results
