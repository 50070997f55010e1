# ABOUTME: Gemini vision provider that reads a title/author guess off a cover photo.
# ABOUTME: Sends the image inline to generateContent and extracts the JSON object it answers with.

import json
import logging
from typing import Any

from bookdrop.metadata.http import HttpClient, MetadataFetchError, MetadataParseError
from bookdrop.metadata.types import CoverGuess

logger = logging.getLogger(__name__)

_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.5-flash"
SOURCE_NAME = "Gemini Vision"

_PROMPT = (
    "Analyze the image, which contains a book cover. Identify the book's title and "
    "author. If the title or author cannot be determined, return an empty string for "
    "that value. Respond with a single, clean JSON object with two keys: 'title' and "
    "'author'. For example: {\"title\": \"The Hobbit\", \"author\": \"J.R.R. Tolkien\"}."
)


def split_data_uri(image_data: str) -> tuple[str, str]:
    """Split a data URI into (mime type, base64 payload).

    A bare base64 string is accepted too and assumed to be JPEG.
    """
    header, sep, payload = image_data.partition(",")
    if not sep:
        return "image/jpeg", image_data
    mime_type = header.removeprefix("data:").split(";")[0] or "image/jpeg"
    return mime_type, payload


def parse_generate_response(data: dict[str, Any]) -> dict[str, str]:
    """Pull the {"title", "author"} object out of a generateContent reply.

    The model may wrap the JSON in prose or a code fence, so the object is
    taken from the first "{" to the last "}" of the reply text.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MetadataParseError(f"No text in Gemini response: {exc}") from exc

    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end < start:
        raise MetadataParseError("Gemini reply contains no JSON object")
    try:
        guess = json.loads(text[start : end + 1])
    except ValueError as exc:
        raise MetadataParseError(f"Gemini reply JSON is invalid: {exc}") from exc

    if not isinstance(guess, dict) or "title" not in guess or "author" not in guess:
        raise MetadataParseError("Gemini reply lacks title/author keys")
    return {"title": str(guess["title"] or ""), "author": str(guess["author"] or "")}


class GeminiVisionProvider:
    """Cover-photo recognition backed by the Gemini generateContent API."""

    def __init__(self, http_client: HttpClient, api_key: str, model: str = DEFAULT_MODEL) -> None:
        self._http = http_client
        self._api_key = api_key
        self._model = model

    @property
    def name(self) -> str:
        return SOURCE_NAME

    def identify(self, image_data: str) -> CoverGuess | None:
        """Ask Gemini for the title and author shown on a cover photo.

        Returns None when no API key is configured, the call fails, or the reply
        cannot be parsed. The original image is attached to the guess.
        """
        if not self._api_key:
            logger.error("GEMINI_API_KEY is not configured.")
            return None

        logger.info("Attempting to get book suggestion and cover from Gemini Vision")
        mime_type, payload = split_data_uri(image_data)
        body = {
            "contents": [
                {
                    "parts": [
                        {"text": _PROMPT},
                        {"inline_data": {"mime_type": mime_type, "data": payload}},
                    ]
                }
            ]
        }
        url = f"{_API_BASE}/{self._model}:generateContent?key={self._api_key}"
        try:
            data = self._http.post(url, body, headers={"Content-Type": "application/json"})
            guess = parse_generate_response(data)
        except MetadataFetchError as exc:
            logger.error("Gemini Vision request failed: %s", exc)
            return None
        except MetadataParseError as exc:
            logger.warning("Gemini Vision API: Could not parse title and author: %s", exc)
            return None

        logger.info(
            "Gemini Vision success: Found title '%s' and author '%s'",
            guess["title"],
            guess["author"],
        )
        return CoverGuess(
            title=guess["title"],
            author=guess["author"],
            cover_ref=image_data,
            source=SOURCE_NAME,
        )
