"""CLI main entry point

napi serve [--host HOST] [--port PORT] [--log-level LEVEL] [--reload]
napi check-config
"""

import json
import sys

import click

from napi import __version__
from napi.config import load_settings
from napi.core.errors import ConfigError
from napi.core.log_setup import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="napi")
def cli():
    """napi - control plane for user services, files and at jobs"""


@cli.command(name="serve")
@click.option("--host", default=None, help="Host to bind to (default: NAPI_HOST or 0.0.0.0)")
@click.option("--port", default=None, type=int, help="Port to bind to (default: PORT or 5499)")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: NAPI_LOG_LEVEL or info)",
)
@click.option("--reload", is_flag=True, help="Enable auto-reload (development mode)")
def serve_cmd(host, port, log_level, reload):
    """Start the HTTP API server"""
    try:
        settings = load_settings()
    except ConfigError as e:
        click.secho(str(e), fg="red", err=True)
        sys.exit(1)

    level = log_level or settings.log_level.lower()
    configure_logging(settings.log_file, level)

    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    click.echo(f"API server is running on port {bind_port}")

    uvicorn.run(
        "napi.webui.app:app_from_env",
        factory=True,
        host=bind_host,
        port=bind_port,
        log_level=level,
        reload=reload,
    )


@cli.command(name="check-config")
def check_config_cmd():
    """Validate the environment and print the effective configuration"""
    try:
        settings = load_settings()
    except ConfigError as e:
        click.secho(str(e), fg="red", err=True)
        sys.exit(1)

    click.echo(json.dumps(settings.describe(), indent=2))
    click.secho("Configuration OK", fg="green")


def main():
    cli()


if __name__ == "__main__":
    main()
