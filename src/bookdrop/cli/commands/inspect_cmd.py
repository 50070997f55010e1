# ABOUTME: The `bookdrop inspect` command for viewing EPUB metadata.
# ABOUTME: Reads a generated EPUB back with ebooklib and shows its metadata.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookdrop.formats.epub import EpubReadError, read_epub_metadata

console = Console()


@click.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def inspect(path: Path) -> None:
    """Show metadata read back from an EPUB file."""
    try:
        meta = read_epub_metadata(path)
    except EpubReadError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    table = Table(title=str(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", meta.title)
    table.add_row("Author", meta.author)
    table.add_row("ISBN", meta.isbn)
    table.add_row("Publisher", meta.publisher)
    table.add_row("Published", meta.published_date)
    table.add_row("Description", meta.description)
    table.add_row("Cover", "yes" if meta.has_cover else "no")

    console.print(table)
