# ABOUTME: Generation pipeline: cover acquisition, EPUB packaging, and ledger recording.
# ABOUTME: Turns a confirmed BookRecord into an artifact on disk plus one ledger line.

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from bookdrop.core.covers import CoverFetcher, usable_cover
from bookdrop.core.ledger import Ledger
from bookdrop.formats.epub import EpubBuilder
from bookdrop.metadata.types import PLACEHOLDER_COVER, BookRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Result of packaging one confirmed record."""

    path: Path
    record: BookRecord
    cover_embedded: bool


def generate_epub(
    record: BookRecord,
    *,
    fetcher: CoverFetcher,
    builder: EpubBuilder,
    ledger: Ledger,
) -> GenerationResult:
    """Package a confirmed record into an EPUB and note it in the ledger.

    The cover is fetched and normalized first. Anything that does not end up
    as JPEG is dropped and the record's cover becomes the placeholder, so the
    title page renders the no-cover block. The ledger is only written once
    the archive exists.

    Raises:
        EpubWriteError: If the archive cannot be written.
    """
    cover = usable_cover(fetcher.acquire(record.cover_ref))
    if cover is None:
        if record.has_cover:
            logger.warning("No valid cover image for '%s'. Using placeholder.", record.title)
        record = replace(record, cover_ref=PLACEHOLDER_COVER)

    path = builder.build(record, cover)
    ledger.record(record.isbn, record.title)
    return GenerationResult(path=path, record=record, cover_embedded=cover is not None)
