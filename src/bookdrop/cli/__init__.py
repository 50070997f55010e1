# ABOUTME: CLI package for bookdrop, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

from pathlib import Path

import click

from bookdrop.cli.commands import (
    create_cmd,
    history_cmd,
    inspect_cmd,
    lookup_cmd,
    search_cmd,
    serve_cmd,
)
from bookdrop.cli.options import env_file_option


@click.group()
@click.version_option(package_name="bookdrop")
@env_file_option
@click.pass_context
def cli(ctx: click.Context, env_file: Path | None) -> None:
    """bookdrop - turn a scanned ISBN or cover photo into a placeholder EPUB."""
    ctx.ensure_object(dict).setdefault("env_file", env_file)


cli.add_command(serve_cmd.serve)
cli.add_command(lookup_cmd.lookup)
cli.add_command(search_cmd.search)
cli.add_command(create_cmd.create)
cli.add_command(inspect_cmd.inspect)
cli.add_command(history_cmd.history)
