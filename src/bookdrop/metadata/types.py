# ABOUTME: Core metadata data structures shared by adapters, resolution, and packaging.
# ABOUTME: BookRecord is the interchange format; outcomes tag what a resolution found.

from dataclasses import asdict, dataclass, field, replace
from typing import Any

TITLE_NOT_FOUND = "Title Not Found"
AUTHOR_NOT_FOUND = "Author Not Found"
NO_DESCRIPTION = "No description available."
PUBLISHER_NOT_FOUND = "Publisher Not Found"
NOT_AVAILABLE = "N/A"
PLACEHOLDER_COVER = "placeholder"

# Adapters fall back to these when an upstream hit lacks a title or author.
UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"

PLACEHOLDER_VALUES = frozenset(
    {
        TITLE_NOT_FOUND,
        AUTHOR_NOT_FOUND,
        NO_DESCRIPTION,
        PUBLISHER_NOT_FOUND,
        NOT_AVAILABLE,
        PLACEHOLDER_COVER,
    }
)

# Wire key -> attribute name, for the JSON shape the scanner front end speaks.
_WIRE_KEYS = {
    "isbn": "isbn",
    "title": "title",
    "subtitle": "subtitle",
    "author": "author",
    "description": "description",
    "publisher": "publisher",
    "publishedDate": "published_date",
    "cover_url": "cover_ref",
    "source": "source",
}


def is_placeholder(value: str | None) -> bool:
    """Whether a field value is missing or one of the sentinel placeholders."""
    return not value or value in PLACEHOLDER_VALUES


@dataclass(frozen=True)
class BookRecord:
    """Bibliographic metadata for one book.

    Every field is a string. Missing data is carried as a sentinel placeholder
    rather than None so a title page can always be rendered. ``cover_ref`` is a
    remote URL, an inline ``data:`` URI, or ``PLACEHOLDER_COVER``.
    """

    isbn: str = NOT_AVAILABLE
    title: str = TITLE_NOT_FOUND
    subtitle: str = ""
    author: str = AUTHOR_NOT_FOUND
    description: str = NO_DESCRIPTION
    publisher: str = PUBLISHER_NOT_FOUND
    published_date: str = NOT_AVAILABLE
    cover_ref: str = PLACEHOLDER_COVER
    source: str = ""

    @property
    def has_cover(self) -> bool:
        """Whether cover_ref points at something fetchable."""
        return not is_placeholder(self.cover_ref)

    @property
    def primary_author(self) -> str:
        """First author when several are joined with ' & '."""
        return self.author.split(" & ")[0].strip()

    def with_placeholders(self) -> "BookRecord":
        """Return a copy whose empty title/author are replaced by placeholders."""
        return replace(
            self,
            title=self.title.strip() or TITLE_NOT_FOUND,
            author=self.author.strip() or AUTHOR_NOT_FOUND,
            cover_ref=self.cover_ref or PLACEHOLDER_COVER,
        )

    def to_dict(self) -> dict[str, str]:
        """Serialize to the JSON wire shape (camelCase publishedDate, cover_url)."""
        values = asdict(self)
        return {wire: values[attr] for wire, attr in _WIRE_KEYS.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BookRecord":
        """Build a record from the JSON wire shape.

        Missing or null keys fall back to their placeholders; non-string values
        (years sent as numbers, for example) are coerced to strings.
        """
        kwargs: dict[str, str] = {}
        for wire, attr in _WIRE_KEYS.items():
            value = data.get(wire)
            if value is None:
                continue
            kwargs[attr] = str(value).strip()
        return cls(**kwargs).with_placeholders()


@dataclass(frozen=True)
class CoverGuess:
    """A best-effort title/author read off a cover photo.

    Either field may be an empty string when the vision service could not
    determine it. The photo itself travels along as ``cover_ref``.
    """

    title: str
    author: str
    cover_ref: str
    source: str = "Gemini Vision"

    @property
    def is_complete(self) -> bool:
        return bool(self.title.strip()) and bool(self.author.strip())

    def to_record(self) -> BookRecord:
        return BookRecord(
            title=self.title.strip(),
            author=self.author.strip(),
            cover_ref=self.cover_ref,
            source=self.source,
        ).with_placeholders()


@dataclass(frozen=True)
class Found:
    """Resolution produced exactly one record."""

    record: BookRecord


@dataclass(frozen=True)
class Ambiguous:
    """Resolution produced several unmerged candidates needing a human pick."""

    candidates: tuple[BookRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NotFound:
    """Resolution produced nothing usable."""


ResolutionOutcome = Found | Ambiguous | NotFound
