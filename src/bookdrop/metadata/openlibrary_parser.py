# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts the Books API and Search API shapes into BookRecord instances.

from typing import Any

from bookdrop.metadata.http import MetadataParseError
from bookdrop.metadata.types import (
    NOT_AVAILABLE,
    PLACEHOLDER_COVER,
    UNKNOWN_AUTHOR,
    UNKNOWN_TITLE,
    BookRecord,
)

SOURCE_NAME = "Open Library"

_COVERS_BASE_URL = "https://covers.openlibrary.org/b/id"


def _join_authors(names: list[str]) -> str:
    return " & ".join(name for name in names if name) or UNKNOWN_AUTHOR


def parse_books_response(data: dict[str, Any], isbn: str) -> BookRecord | None:
    """Parse an Open Library Books API (jscmd=data) response for one ISBN.

    The response is keyed by bibkey, e.g. {"ISBN:9780156001311": {...}}.
    Returns None when the ISBN is not in the response.
    """
    book = data.get(f"ISBN:{isbn}")
    if book is None:
        return None
    try:
        authors = [entry.get("name", "") for entry in book.get("authors", [])]
        excerpts = book.get("excerpts") or []
        publishers = book.get("publishers") or []
        cover = book.get("cover") or {}
        return BookRecord(
            isbn=isbn,
            title=book.get("title") or UNKNOWN_TITLE,
            subtitle=book.get("subtitle") or "",
            author=_join_authors(authors),
            description=excerpts[0].get("text", "") if excerpts else "",
            publisher=publishers[0].get("name", "") if publishers else "",
            published_date=str(book.get("publish_date") or ""),
            cover_ref=cover.get("large") or cover.get("medium") or PLACEHOLDER_COVER,
            source=SOURCE_NAME,
        )
    except (KeyError, IndexError, AttributeError, TypeError) as exc:
        raise MetadataParseError(f"Unexpected Open Library book shape: {exc}") from exc


def parse_search_results(data: dict[str, Any], limit: int) -> list[BookRecord]:
    """Parse an Open Library Search API response into at most ``limit`` records.

    Each doc carries title, author_name, isbn, publisher, cover_i, etc. The
    search API has no description, so the first sentence stands in for one.
    """
    docs = data.get("docs", [])
    if not isinstance(docs, list):
        raise MetadataParseError("Open Library search 'docs' is not a list")

    results: list[BookRecord] = []
    try:
        for doc in docs[:limit]:
            first_sentence = doc.get("first_sentence") or []
            if isinstance(first_sentence, str):
                first_sentence = [first_sentence]
            publishers = doc.get("publisher") or []
            isbns = doc.get("isbn") or []
            cover_id = doc.get("cover_i")

            results.append(
                BookRecord(
                    isbn=isbns[0] if isbns else NOT_AVAILABLE,
                    title=doc.get("title") or UNKNOWN_TITLE,
                    subtitle=doc.get("subtitle") or "",
                    author=_join_authors(doc.get("author_name") or []),
                    description=first_sentence[0] if first_sentence else "",
                    publisher=publishers[0] if publishers else "",
                    published_date=str(doc.get("first_publish_year") or ""),
                    cover_ref=build_cover_url(cover_id) if cover_id else PLACEHOLDER_COVER,
                    source=SOURCE_NAME,
                )
            )
    except (KeyError, IndexError, AttributeError, TypeError) as exc:
        raise MetadataParseError(f"Unexpected Open Library search shape: {exc}") from exc

    return results


def build_cover_url(cover_id: int | str, size: str = "L") -> str:
    """Build an Open Library cover image URL for a cover id.

    Args:
        cover_id: The numeric cover id from a search doc's ``cover_i``.
        size: Image size, "S" (small), "M" (medium), or "L" (large).
    """
    return f"{_COVERS_BASE_URL}/{cover_id}-{size}.jpg"
