# ABOUTME: Metadata package for bibliographic lookups and their consolidation.
# ABOUTME: Exports the BookRecord model, resolution outcomes, and the resolution engine.

from bookdrop.metadata.provider import CoverVisionProvider, IsbnProvider, SearchProvider
from bookdrop.metadata.resolver import ResolutionEngine, consolidate
from bookdrop.metadata.types import (
    Ambiguous,
    BookRecord,
    CoverGuess,
    Found,
    NotFound,
    ResolutionOutcome,
)

__all__ = [
    "Ambiguous",
    "BookRecord",
    "CoverGuess",
    "CoverVisionProvider",
    "Found",
    "IsbnProvider",
    "NotFound",
    "ResolutionEngine",
    "ResolutionOutcome",
    "SearchProvider",
    "consolidate",
]
