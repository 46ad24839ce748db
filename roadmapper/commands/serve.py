"""
Serve command: run the API server.
"""
import logging
from typing import Optional

import click

from roadmapper.config import ServerConfig
from roadmapper.exceptions import ConfigurationError
from roadmapper.server import create_app, startup_banner


@click.command(name="serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, help="Port to listen on (default: PORT or 3000).")
@click.option("--debug", is_flag=True, help="Enable the Flask debugger and reloader.")
def serve(host: str, port: Optional[int], debug: bool):
    """Run the Notion-backed API server."""
    try:
        config = ServerConfig.from_env()
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    port = port or config.port

    app = create_app(config)
    app.logger.setLevel(logging.INFO)

    for line in startup_banner(config, host, port):
        click.echo(line)
    if not config.is_configured:
        click.echo("  ⚠ Notion is not fully configured; entity routes will fail.", err=True)

    app.run(host=host, port=port, debug=debug)
