# ABOUTME: Shared Click options and context helpers for bookdrop CLI commands.
# ABOUTME: Loads Settings once per invocation and hands commands a ready Services graph.

from pathlib import Path

import click

from bookdrop.config import ConfigError, load_settings
from bookdrop.core.services import Services, create_services
from bookdrop.log import configure_logging

env_file_option = click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to a .env file with API credentials and file locations (default: ./.env)",
)


def get_services(ctx: click.Context) -> Services:
    """Return the Services for this invocation, building them on first use.

    Tests pass a prebuilt graph through ``obj={"services": ...}``.
    """
    obj = ctx.ensure_object(dict)
    services = obj.get("services")
    if services is not None:
        return services

    try:
        settings = load_settings(obj.get("env_file"))
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    configure_logging(settings.debug_log_file)
    services = create_services(settings)
    ctx.call_on_close(services.close)
    obj["services"] = services
    return services
