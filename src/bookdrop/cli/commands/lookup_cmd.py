# ABOUTME: The `bookdrop lookup` command for resolving an ISBN without writing anything.
# ABOUTME: Prints the consolidated record from every ISBN source.

import click
from rich.console import Console

from bookdrop.cli.options import get_services
from bookdrop.cli.review import record_table
from bookdrop.metadata.types import Found

console = Console()


@click.command()
@click.argument("isbn")
@click.pass_context
def lookup(ctx: click.Context, isbn: str) -> None:
    """Look up an ISBN and show the consolidated metadata."""
    services = get_services(ctx)
    outcome = services.engine.resolve_isbn(isbn.strip())

    if not isinstance(outcome, Found):
        console.print(f"[yellow]Could not find sufficient metadata for ISBN: {isbn}[/yellow]")
        raise SystemExit(1)

    console.print(record_table(outcome.record, title=f"ISBN {isbn}"))
