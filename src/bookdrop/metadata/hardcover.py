# ABOUTME: Hardcover metadata provider implementation.
# ABOUTME: Searches the Hardcover GraphQL API by title and author; requires a bearer token.

import logging
from typing import Any

from bookdrop.metadata.http import HttpClient, MetadataFetchError, MetadataParseError
from bookdrop.metadata.types import (
    NOT_AVAILABLE,
    PLACEHOLDER_COVER,
    UNKNOWN_AUTHOR,
    UNKNOWN_TITLE,
    BookRecord,
)

logger = logging.getLogger(__name__)

GRAPHQL_ENDPOINT = "https://api.hardcover.app/v1/graphql"
SOURCE_NAME = "Hardcover"
SEARCH_LIMIT = 3

_SEARCH_QUERY = (
    "query SearchBooks($query: String!) "
    '{ search(query: $query, query_type: "books") { results } }'
)


def parse_search_response(data: dict[str, Any], limit: int) -> list[BookRecord]:
    """Parse a Hardcover search response into at most ``limit`` records.

    Hits live under data.search.results.hits[].document. A GraphQL "errors"
    member means the query failed as a whole.
    """
    if data.get("errors"):
        raise MetadataParseError(f"Hardcover GraphQL error: {data['errors']}")

    try:
        search = (data.get("data") or {}).get("search") or {}
        hits = (search.get("results") or {}).get("hits") or []
        results: list[BookRecord] = []
        for hit in hits[:limit]:
            doc = hit.get("document") or {}
            image = doc.get("image") or {}
            isbns = doc.get("isbns") or []
            results.append(
                BookRecord(
                    isbn=isbns[0] if isbns else NOT_AVAILABLE,
                    title=doc.get("title") or UNKNOWN_TITLE,
                    subtitle=doc.get("subtitle") or "",
                    author=" & ".join(doc.get("author_names") or []) or UNKNOWN_AUTHOR,
                    description=doc.get("description") or "",
                    publisher=doc.get("publisher") or "",
                    published_date=str(doc.get("release_date") or ""),
                    cover_ref=image.get("url") or PLACEHOLDER_COVER,
                    source=SOURCE_NAME,
                )
            )
    except (KeyError, IndexError, AttributeError, TypeError) as exc:
        raise MetadataParseError(f"Unexpected Hardcover search shape: {exc}") from exc
    return results


class HardcoverProvider:
    """Title/author search provider backed by the Hardcover GraphQL API."""

    def __init__(self, http_client: HttpClient, bearer_token: str) -> None:
        self._http = http_client
        self._token = bearer_token

    @property
    def name(self) -> str:
        return SOURCE_NAME

    def search(self, title: str, author: str) -> list[BookRecord]:
        """Run a free-text "<title> <author>" book search.

        Returns an empty list without issuing a request when no token is set.
        """
        if not self._token:
            logger.warning("HARDCOVER_BEARER_TOKEN is not configured; skipping Hardcover.")
            return []

        query = f"{title} {author}".strip()
        logger.info("Attempting to get metadata from Hardcover for %s", query)
        payload = {"query": _SEARCH_QUERY, "variables": {"query": query}}
        headers = {"Authorization": self._token}
        try:
            data = self._http.post(GRAPHQL_ENDPOINT, payload, headers=headers)
            results = parse_search_response(data, SEARCH_LIMIT)
        except MetadataFetchError as exc:
            logger.error("Hardcover search failed for %s: %s", query, exc)
            return []
        except MetadataParseError as exc:
            logger.warning("Hardcover response unusable for %s: %s", query, exc)
            return []

        if not results:
            logger.warning("Hardcover API: Book not found.")
            return []
        logger.info("Hardcover success: Found %d book(s).", len(results))
        return results
