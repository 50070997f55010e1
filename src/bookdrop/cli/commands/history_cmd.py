# ABOUTME: The `bookdrop history` command listing previously generated EPUBs.
# ABOUTME: Reads the processed-ISBN ledger.

import click
from rich.console import Console
from rich.table import Table

from bookdrop.cli.options import get_services

console = Console()


@click.command()
@click.pass_context
def history(ctx: click.Context) -> None:
    """Show the ISBNs that have been turned into EPUBs."""
    entries = get_services(ctx).ledger.entries()

    if not entries:
        console.print("[yellow]No EPUBs generated yet.[/yellow]")
        return

    table = Table()
    table.add_column("When", style="dim")
    table.add_column("ISBN")
    table.add_column("Title", style="bold")

    for entry in entries:
        table.add_row(entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"), entry.isbn, entry.title)

    console.print(table)
    console.print(f"\n[dim]{len(entries)} EPUB(s)[/dim]")
