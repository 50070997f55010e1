# ABOUTME: In-memory HTTP client double shared by the adapter, cover, and service tests.
# ABOUTME: Returns canned responses by URL substring and records every request it sees.

from typing import Any


class FakeHttpClient:
    """Fake HTTP client that returns canned responses based on URL patterns.

    A response may be an Exception instance, which is raised instead. Unknown
    URLs answer with an empty dict (or empty bytes for get_bytes).
    """

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        images: dict[str, Any] | None = None,
    ) -> None:
        self._responses = responses or {}
        self._images = images or {}
        self.request_log: list[str] = []
        self.params_log: list[dict[str, str] | None] = []
        self.payload_log: list[dict[str, Any]] = []
        self.headers_log: list[dict[str, str] | None] = []

    def respond(self, pattern: str, response: Any) -> None:
        """Add or replace the canned response for a URL pattern."""
        self._responses[pattern] = response

    def get(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        self.request_log.append(url)
        self.params_log.append(params)
        self.headers_log.append(headers)
        return self._match(self._responses, url, {})

    def post(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        self.request_log.append(url)
        self.payload_log.append(payload)
        self.headers_log.append(headers)
        return self._match(self._responses, url, {})

    def get_bytes(self, url: str) -> bytes:
        self.request_log.append(url)
        return self._match(self._images, url, b"")

    @staticmethod
    def _match(table: dict[str, Any], url: str, default: Any) -> Any:
        for pattern, response in table.items():
            if pattern in url:
                if isinstance(response, Exception):
                    raise response
                return response
        return default
