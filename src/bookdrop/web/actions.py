# ABOUTME: Request actions for the JSON endpoint, mapping workflow outcomes to response envelopes.
# ABOUTME: Every failure, expected or not, comes back as {"success": false, "message": ...}.

import logging
from collections.abc import Callable
from typing import Any

from bookdrop.core.services import Services
from bookdrop.core.workflow import Workflow
from bookdrop.formats.epub import EpubWriteError
from bookdrop.metadata.types import Ambiguous, BookRecord, Found, ResolutionOutcome

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "search"

Envelope = dict[str, Any]


def failure(message: str, **extra: Any) -> Envelope:
    return {"success": False, "message": message, **extra}


def _outcome_envelope(outcome: ResolutionOutcome) -> Envelope | None:
    """Envelope for Found/Ambiguous, or None for NotFound."""
    if isinstance(outcome, Found):
        return {
            "success": True,
            "requires_confirmation": True,
            "metadata": outcome.record.to_dict(),
        }
    if isinstance(outcome, Ambiguous):
        return {
            "success": True,
            "requires_selection": True,
            "options": [candidate.to_dict() for candidate in outcome.candidates],
        }
    return None


def search(payload: dict[str, Any], workflow: Workflow) -> Envelope:
    isbn = str(payload.get("isbn") or "").strip()
    if not isbn:
        return failure("An ISBN is required for searching.")

    logger.info("Starting ISBN search for: %s", isbn)
    envelope = _outcome_envelope(workflow.search_isbn(isbn))
    if envelope is not None:
        return envelope
    return failure(
        f"Could not find sufficient metadata for ISBN: {isbn}. Trying manual search...",
        requires_manual_search=True,
        isbn_fallback=isbn,
    )


def manual_search(payload: dict[str, Any], workflow: Workflow) -> Envelope:
    title = str(payload.get("title") or "").strip()
    author = str(payload.get("author") or "").strip()
    if not title or not author:
        return failure("Title and Author are required for manual search.")

    logger.info("Starting manual search for Title: %s, Author: %s", title, author)
    envelope = _outcome_envelope(workflow.search_manual(title, author))
    if envelope is not None:
        return envelope
    return failure("Could not find book using manual search. Try a different combination.")


def gemini_cover_search(payload: dict[str, Any], workflow: Workflow) -> Envelope:
    image_data = str(payload.get("image_data") or "").strip()
    if not image_data:
        return failure("No image data provided for analysis.")

    logger.info("Starting cover image search.")
    envelope = _outcome_envelope(workflow.search_cover(image_data))
    if envelope is not None:
        return envelope
    return failure("Could not identify book from cover. Please try manual entry.")


def confirm_epub_creation(payload: dict[str, Any], workflow: Workflow) -> Envelope:
    metadata = payload.get("metadata")
    if not isinstance(metadata, dict) or not str(metadata.get("title") or "").strip():
        return failure("Invalid or missing metadata for confirmation.")

    record = workflow.load(BookRecord.from_dict(metadata))
    logger.info("Confirmation received for: %s", record.title)
    try:
        result = workflow.confirm()
    except EpubWriteError as exc:
        logger.error("EPUB creation failed for book: %s: %s", record.title, exc)
        return failure(f"EPUB creation failed for book: {record.title}")

    created = result.record
    return {
        "success": True,
        "message": f"Successfully created EPUB for '{created.title}'",
        "filename": result.path.name,
        "metadata": {
            "title": created.title,
            "author": created.author,
            "publisher": created.publisher,
            "isbn": created.isbn,
        },
    }


ACTIONS: dict[str, Callable[[dict[str, Any], Workflow], Envelope]] = {
    "search": search,
    "manual_search": manual_search,
    "gemini_cover_search": gemini_cover_search,
    "confirm_epub_creation": confirm_epub_creation,
}


def handle_action(payload: dict[str, Any], services: Services) -> Envelope:
    """Dispatch one request body to its action and return the response envelope.

    Each request runs through a fresh workflow, so no state is shared between
    requests beyond the ledger and the log.
    """
    action = str(payload.get("action") or DEFAULT_ACTION)
    handler = ACTIONS.get(action)
    if handler is None:
        logger.warning("Unknown action requested: %s", action)
        return failure(f"Unknown action: {action}")

    logger.info("Received request. Action: %s", action)
    try:
        return handler(payload, services.workflow())
    except Exception as exc:
        logger.exception("An unexpected error occurred during %s", action)
        return failure(f"An unexpected error occurred during {action}: {exc}")
