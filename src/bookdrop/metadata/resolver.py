# ABOUTME: Resolution engine that turns an ISBN, a title/author query, or a cover photo into an outcome.
# ABOUTME: Consolidates ISBN hits field by field; keeps title/author hits unmerged for disambiguation.

import logging
from collections.abc import Sequence
from dataclasses import fields

from bookdrop.metadata.provider import CoverVisionProvider, IsbnProvider, SearchProvider
from bookdrop.metadata.types import (
    PLACEHOLDER_COVER,
    TITLE_NOT_FOUND,
    Ambiguous,
    BookRecord,
    Found,
    NotFound,
    ResolutionOutcome,
    is_placeholder,
)

logger = logging.getLogger(__name__)

MAX_CANDIDATES_PER_SOURCE = 3

# Fields an ISBN hit may contribute to the consolidated record. "source" is
# rebuilt from the contributing provider names instead.
_MERGE_FIELDS = tuple(f.name for f in fields(BookRecord) if f.name != "source")


def _has_data(name: str, value: str) -> bool:
    if name == "cover_ref":
        return bool(value) and value != PLACEHOLDER_COVER
    return bool(value)


def consolidate(isbn: str, hits: Sequence[BookRecord]) -> BookRecord:
    """Merge ISBN hits, given in priority order, into one record.

    Starting from an all-placeholder record, each hit overwrites a field when
    it has data for it and either the accumulated value is still a placeholder
    or the field is not the description. So later hits win for most fields
    while the first real description sticks. A final pass then gives the cover
    back to the highest-priority hit that has one.
    """
    merged: dict[str, str] = {name: getattr(BookRecord(isbn=isbn), name) for name in _MERGE_FIELDS}
    sources: list[str] = []

    for hit in hits:
        if hit.source and hit.source not in sources:
            sources.append(hit.source)
        for name in _MERGE_FIELDS:
            value = getattr(hit, name)
            if not _has_data(name, value):
                continue
            current = merged[name]
            if name != "description" or is_placeholder(current):
                merged[name] = value

    for hit in hits:
        if hit.has_cover:
            merged["cover_ref"] = hit.cover_ref
            break

    return BookRecord(**merged, source=", ".join(sources))


class ResolutionEngine:
    """Orchestrates the metadata sources for each search mode.

    Providers are called one after another in the order given; that order is
    also the merge priority for ISBN consolidation (first = primary).
    """

    def __init__(
        self,
        *,
        isbn_providers: Sequence[IsbnProvider],
        search_providers: Sequence[SearchProvider],
        vision_provider: CoverVisionProvider | None = None,
    ) -> None:
        self._isbn_providers = list(isbn_providers)
        self._search_providers = list(search_providers)
        self._vision = vision_provider

    def resolve_isbn(self, isbn: str) -> ResolutionOutcome:
        """Look an ISBN up in every ISBN provider and consolidate the hits."""
        hits = [hit for hit in (p.lookup_isbn(isbn) for p in self._isbn_providers) if hit]
        if not hits:
            logger.warning("No ISBN source knows %s", isbn)
            return NotFound()

        record = consolidate(isbn, hits)
        logger.info("Final Consolidated Metadata: %r", record)
        if record.title == TITLE_NOT_FOUND:
            return NotFound()
        return Found(record.with_placeholders())

    def resolve_title_author(self, title: str, author: str) -> ResolutionOutcome:
        """Search every search provider and collect their hits unmerged."""
        candidates: list[BookRecord] = []
        for provider in self._search_providers:
            hits = provider.search(title, author)
            candidates.extend(hit.with_placeholders() for hit in hits[:MAX_CANDIDATES_PER_SOURCE])

        logger.info("Title/author search for %r by %r gave %d candidate(s)", title, author, len(candidates))
        if not candidates:
            return NotFound()
        if len(candidates) == 1:
            return Found(candidates[0])
        return Ambiguous(tuple(candidates))

    def resolve_cover(self, image_data: str) -> ResolutionOutcome:
        """Identify a book from a cover photo, then search for matching editions.

        An incomplete guess goes straight back for confirmation since there is
        nothing to search with. A complete guess is offered alongside whatever
        the title/author search finds for it.
        """
        if self._vision is None:
            logger.error("No cover vision provider is configured.")
            return NotFound()

        guess = self._vision.identify(image_data)
        if guess is None:
            return NotFound()

        guess_record = guess.to_record()
        if not guess.is_complete:
            logger.info("Cover guess is incomplete; routing to confirmation.")
            return Found(guess_record)

        searched = self.resolve_title_author(guess.title, guess.author)
        if isinstance(searched, Ambiguous):
            others = searched.candidates
        elif isinstance(searched, Found):
            others = (searched.record,)
        else:
            others = ()

        if not others:
            return Found(guess_record)
        return Ambiguous((guess_record, *others))
