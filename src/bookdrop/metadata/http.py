# ABOUTME: HTTP client abstraction for bibliographic, vision, and cover API calls.
# ABOUTME: One attempt per call with fixed connect/total timeouts and injectable transport.

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_REQUEST_TIMEOUT = 15.0


class MetadataFetchError(Exception):
    """Raised when a request fails in transport: connection, timeout, or non-2xx."""


class MetadataParseError(Exception):
    """Raised when an upstream response body cannot be understood."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the HTTP operations the adapters and cover fetcher need."""

    def get(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]: ...

    def post(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]: ...

    def get_bytes(self, url: str) -> bytes: ...


class BookdropHttpClient:
    """HTTP client for upstream API calls.

    Wraps httpx.Client with a connect timeout and an overall timeout. Calls are
    never retried: a failed source is simply treated as absent by its caller.
    """

    def __init__(
        self,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": "bookdrop/0.1.0"},
            "timeout": httpx.Timeout(request_timeout, connect=connect_timeout),
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    def get(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send a GET request and return the decoded JSON body.

        Raises:
            MetadataFetchError: On transport errors or non-2xx responses.
            MetadataParseError: If the body is not JSON.
        """
        response = self._send("GET", url, params=params, headers=headers)
        return self._decode_json(url, response)

    def post(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send a JSON POST request and return the decoded JSON body."""
        response = self._send("POST", url, json=payload, headers=headers)
        return self._decode_json(url, response)

    def get_bytes(self, url: str) -> bytes:
        """Fetch a URL and return the raw response body."""
        return self._send("GET", url).content

    def close(self) -> None:
        self._client.close()

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.info("Fetching URL: %s (%s)", _redact(url), method)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Request failed for %s: %s", _redact(url), exc)
            raise MetadataFetchError(f"Request failed: {_redact(url)}: {exc}") from exc

        if not response.is_success:
            logger.error("HTTP %d from %s", response.status_code, _redact(url))
            raise MetadataFetchError(f"HTTP {response.status_code} from {_redact(url)}")

        logger.info("Successfully fetched URL, HTTP code: %d", response.status_code)
        return response

    @staticmethod
    def _decode_json(url: str, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise MetadataParseError(f"Invalid JSON from {_redact(url)}: {exc}") from exc
        if not isinstance(data, dict):
            raise MetadataParseError(f"Expected a JSON object from {_redact(url)}")
        return data


def _redact(url: str) -> str:
    """Hide API keys passed as query parameters before a URL is logged."""
    head, sep, _ = url.partition("key=")
    return f"{head}{sep}***" if sep else url
