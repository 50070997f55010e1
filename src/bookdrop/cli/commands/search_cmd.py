# ABOUTME: The `bookdrop search` command for title/author lookups.
# ABOUTME: Lists the unmerged candidates from every search source.

import click
from rich.console import Console

from bookdrop.cli.options import get_services
from bookdrop.cli.review import candidates_table
from bookdrop.metadata.types import Ambiguous, Found

console = Console()


@click.command("search")
@click.option("--title", "-t", required=True, help="Book title.")
@click.option("--author", "-a", required=True, help="Book author.")
@click.pass_context
def search(ctx: click.Context, title: str, author: str) -> None:
    """Search the bibliographic sources by title and author."""
    services = get_services(ctx)
    outcome = services.engine.resolve_title_author(title.strip(), author.strip())

    if isinstance(outcome, Found):
        candidates = (outcome.record,)
    elif isinstance(outcome, Ambiguous):
        candidates = outcome.candidates
    else:
        console.print("[yellow]No results found.[/yellow]")
        return

    console.print(candidates_table(candidates))
    console.print(f"\n[dim]{len(candidates)} result(s)[/dim]")
