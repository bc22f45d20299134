"""Entry point for running Quire as a module: python -m quire"""

import os
import sys

import click
import uvicorn

from quire.config import get_settings


@click.command()
@click.option("--host", default=None, help="Bind address (overrides HOST)")
@click.option("--port", type=int, default=None, help="Port (overrides PORT / QUIRE_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON config file",
)
def main(host: str | None, port: int | None, reload: bool, config_file: str | None):
    """Run the Quire MCP + REST server."""
    if config_file:
        # Read by get_settings(), here and in the app factory
        os.environ["QUIRE_CONFIG"] = config_file
    settings = get_settings()

    port_source = "default (8080)"
    if port is not None:
        port_source = "--port option"
    elif "PORT" in os.environ:
        port_source = "PORT environment variable"
    elif "QUIRE_PORT" in os.environ:
        port_source = "QUIRE_PORT environment variable"

    bind_host = host or settings.host
    bind_port = port or settings.port
    click.echo(f"Starting Quire on {bind_host}:{bind_port} (port from {port_source})")

    try:
        uvicorn.run(
            "quire.api.main:create_app",
            factory=True,
            host=bind_host,
            port=bind_port,
            reload=reload or settings.debug,
            log_level=settings.log_level.lower(),
        )
    except SystemExit:
        sys.exit(1)


if __name__ == "__main__":
    main()
