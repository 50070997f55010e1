# ABOUTME: The `bookdrop create` command: the full interactive scan-to-EPUB workflow.
# ABOUTME: Resolves by ISBN, title/author, or cover photo, then confirms, edits, and generates.

import base64
from pathlib import Path

import click
from rich.console import Console

from bookdrop.cli.options import get_services
from bookdrop.cli.review import ReviewSession
from bookdrop.core.covers import JPEG_MIME, UNKNOWN_MIME, sniff_mime, to_jpeg
from bookdrop.core.workflow import Workflow, WorkflowState
from bookdrop.formats.epub import EpubWriteError

console = Console()


def _cover_data_uri(path: Path) -> str:
    """Read a cover photo as a JPEG data URI, converting other image types."""
    data = path.read_bytes()
    mime = sniff_mime(data)
    if mime == UNKNOWN_MIME:
        raise click.BadParameter(f"{path} is not a recognised image", param_hint="--cover")
    if mime != JPEG_MIME:
        try:
            data = to_jpeg(data)
        except (OSError, ValueError) as exc:
            raise click.BadParameter(
                f"{path} could not be converted to JPEG: {exc}", param_hint="--cover"
            ) from exc
        mime = JPEG_MIME
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def _manual_fallback(workflow: Workflow) -> None:
    """Keep asking for title and author until something is found or the user gives up."""
    while workflow.state is WorkflowState.MANUAL_FALLBACK:
        console.print("[yellow]Nothing found. Enter a title and author to search manually.[/yellow]")
        title = click.prompt("Title", default="", show_default=False).strip()
        author = click.prompt("Author", default="", show_default=False).strip()
        if not title or not author:
            workflow.reset()
            return
        workflow.search_manual(title, author)


@click.command()
@click.argument("isbn", required=False)
@click.option("--title", "-t", default=None, help="Search by title instead of ISBN.")
@click.option("--author", "-a", default=None, help="Author to search with --title.")
@click.option(
    "--cover",
    "cover_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Identify the book from a photo of its cover.",
)
@click.option("--yes", "-y", is_flag=True, help="Accept a single match without prompting.")
@click.pass_context
def create(
    ctx: click.Context,
    isbn: str | None,
    title: str | None,
    author: str | None,
    cover_path: Path | None,
    yes: bool,
) -> None:
    """Find a book and generate its placeholder EPUB."""
    if not isbn and not cover_path and not (title and author):
        raise click.UsageError("Give an ISBN, --title with --author, or --cover.")

    services = get_services(ctx)
    workflow = services.workflow()
    session = ReviewSession(console=console, auto_confirm=yes)

    if isbn:
        workflow.search_isbn(isbn.strip())
    elif cover_path:
        workflow.search_cover(_cover_data_uri(cover_path))
    else:
        workflow.search_manual(title.strip(), author.strip())

    if workflow.state is WorkflowState.MANUAL_FALLBACK:
        if yes:
            console.print("[red]Error:[/red] No metadata found.")
            raise SystemExit(1)
        _manual_fallback(workflow)

    if workflow.state is WorkflowState.SELECTING:
        choice = session.choose(workflow.candidates)
        if choice is None:
            if yes:
                console.print(
                    f"[yellow]{len(workflow.candidates)} candidates found; "
                    "run without --yes to pick one.[/yellow]"
                )
                raise SystemExit(1)
            workflow.reset()
        else:
            workflow.select(choice)

    if workflow.state is not WorkflowState.CONFIRMING or workflow.record is None:
        console.print("Skipped.")
        return

    edits = session.confirm(workflow.record)
    if edits is None:
        workflow.reset()
        console.print("Skipped.")
        return
    workflow.edit(**edits)

    try:
        result = workflow.confirm()
    except EpubWriteError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(f"[green]Successfully created EPUB for '{result.record.title}'[/green]")
    console.print(f"  {result.path}")
    if not result.cover_embedded:
        console.print("  [dim]No usable cover; the title page shows a placeholder.[/dim]")
