# ABOUTME: Provider protocols defining the contracts for each kind of metadata source.
# ABOUTME: ISBN lookup, title/author search, and cover-photo recognition are separate capabilities.

from typing import Protocol, runtime_checkable

from bookdrop.metadata.types import BookRecord, CoverGuess


@runtime_checkable
class IsbnProvider(Protocol):
    """A source that can look a book up by ISBN.

    Returns at most one record, or None when the book is unknown or the source
    could not be reached.
    """

    @property
    def name(self) -> str: ...

    def lookup_isbn(self, isbn: str) -> BookRecord | None: ...


@runtime_checkable
class SearchProvider(Protocol):
    """A source that can search by free-text title and author.

    Returns ranked candidates, best first; an empty list on a miss or failure.
    """

    @property
    def name(self) -> str: ...

    def search(self, title: str, author: str) -> list[BookRecord]: ...


@runtime_checkable
class CoverVisionProvider(Protocol):
    """A source that reads a title/author guess off a cover photo."""

    @property
    def name(self) -> str: ...

    def identify(self, image_data: str) -> CoverGuess | None: ...
