# ABOUTME: The `bookdrop serve` command that runs the JSON endpoint.
# ABOUTME: Starts Flask's server with the configured service graph.

import click

from bookdrop.cli.options import get_services
from bookdrop.web import create_app


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=5000, show_default=True, type=int, help="Port to listen on.")
@click.option("--debug", is_flag=True, help="Run Flask in debug mode.")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, debug: bool) -> None:
    """Serve the scan-to-EPUB JSON endpoint."""
    app = create_app(get_services(ctx))
    app.run(host=host, port=port, debug=debug)
