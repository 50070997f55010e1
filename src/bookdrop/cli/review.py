# ABOUTME: Interactive review for candidate selection and record confirmation.
# ABOUTME: Displays records in Rich tables and prompts the user to pick, edit, or skip.

from dataclasses import replace

import click
from rich.console import Console
from rich.table import Table

from bookdrop.metadata.types import BookRecord, is_placeholder

EDITABLE_FIELDS = ("title", "author", "subtitle", "isbn")


def _cell(value: str) -> str:
    if not value or is_placeholder(value):
        return f"[dim]{value or 'none'}[/dim]"
    return value


def _short(value: str, width: int = 60) -> str:
    return value if len(value) <= width else value[: width - 1] + "…"


def record_table(record: BookRecord, title: str = "Book") -> Table:
    """Render every field of a record as a two-column table."""
    table = Table(title=title, show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", _cell(record.title))
    table.add_row("Subtitle", _cell(record.subtitle))
    table.add_row("Author", _cell(record.author))
    table.add_row("ISBN", _cell(record.isbn))
    table.add_row("Publisher", _cell(record.publisher))
    table.add_row("Published", _cell(record.published_date))
    table.add_row("Description", _cell(_short(record.description, 200)))
    table.add_row("Cover", "yes" if record.has_cover else "no")
    table.add_row("Source", _cell(record.source))
    return table


def candidates_table(candidates: tuple[BookRecord, ...] | list[BookRecord]) -> Table:
    table = Table(title="Candidates")
    table.add_column("#", style="bold", width=3)
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Published")
    table.add_column("Source", style="dim")

    for i, candidate in enumerate(candidates, start=1):
        title = candidate.title
        if candidate.subtitle:
            title = f"{title}: {candidate.subtitle}"
        table.add_row(
            str(i),
            _short(title),
            _cell(candidate.author),
            _cell(candidate.isbn),
            _cell(candidate.published_date),
            candidate.source,
        )
    return table


class ReviewSession:
    """Interactive review of search results.

    In auto-confirm mode a single record is accepted unchanged, but a choice
    between several candidates is never made on the user's behalf.
    """

    def __init__(self, *, console: Console | None = None, auto_confirm: bool = False) -> None:
        self._console = console or Console()
        self._auto_confirm = auto_confirm

    def choose(self, candidates: tuple[BookRecord, ...]) -> int | None:
        """Prompt for one of the candidates.

        Returns:
            The zero-based index of the chosen candidate, or None to skip.
        """
        if not candidates or self._auto_confirm:
            return None

        self._console.print(candidates_table(candidates))

        while True:
            choice = click.prompt(
                "[1-N] Select  [v1-vN] View details  [s] Skip", type=str, default="s"
            ).strip().lower()

            if choice == "s":
                return None

            # Detail view: v<N>
            if choice.startswith("v"):
                try:
                    idx = int(choice[1:]) - 1
                except ValueError:
                    continue
                if 0 <= idx < len(candidates):
                    self._console.print(record_table(candidates[idx], title=f"Candidate {idx + 1}"))
                    if click.prompt("[a] Accept  [b] Back to list", type=str, default="b").lower() == "a":
                        return idx
                    self._console.print(candidates_table(candidates))
                continue

            try:
                idx = int(choice) - 1
            except ValueError:
                continue
            if 0 <= idx < len(candidates):
                return idx

    def confirm(self, record: BookRecord) -> dict[str, str] | None:
        """Show the record and collect optional edits before generation.

        Returns:
            Field overrides (empty when accepted as is), or None to skip.
        """
        if self._auto_confirm:
            return {}

        self._console.print(record_table(record, title="Confirm metadata"))
        edits: dict[str, str] = {}

        while True:
            choice = click.prompt(
                "[c] Create EPUB  [e] Edit  [s] Skip", type=str, default="c"
            ).strip().lower()
            if choice == "s":
                return None
            if choice == "c":
                return edits
            if choice == "e":
                edits = self._edit_prompt(record, edits)
                self._console.print(record_table(_preview(record, edits), title="Confirm metadata"))

    def _edit_prompt(self, record: BookRecord, edits: dict[str, str]) -> dict[str, str]:
        updated = dict(edits)
        for name in EDITABLE_FIELDS:
            current = updated.get(name, getattr(record, name))
            value = click.prompt(name.capitalize(), default=current, show_default=True)
            if value != getattr(record, name):
                updated[name] = value
            else:
                updated.pop(name, None)
        return updated


def _preview(record: BookRecord, edits: dict[str, str]) -> BookRecord:
    return replace(record, **{k: v.strip() for k, v in edits.items()}).with_placeholders()
