"""
Command-line interface for Roadmapper.

Works on local data in .roadmap/ by default, or against a running
Roadmapper server with --remote (or ROADMAP_API_URL).
"""
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from roadmapper.commands.config import config
from roadmapper.commands.data import data
from roadmapper.commands.deliverable import deliverable
from roadmapper.commands.goal import goal
from roadmapper.commands.initiative import initiative
from roadmapper.commands.serve import serve
from roadmapper.commands.view import view


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="ROADMAP_DATA_DIR",
    help="Local data directory (default: .roadmap).",
)
@click.option("--remote", "remote_url", envvar="ROADMAP_API_URL", help="Roadmapper server URL.")
@click.option("--api-key", envvar="API_KEY", help="Access key for the remote server.")
@click.pass_context
def cli(ctx, data_dir: Optional[Path], remote_url: Optional[str], api_key: Optional[str]):
    """Plan goals, initiatives and deliverables on a product roadmap."""
    ctx.ensure_object(dict)
    ctx.obj["options"] = {
        "data_dir": data_dir,
        "remote_url": remote_url,
        "api_key": api_key,
    }


cli.add_command(goal)
cli.add_command(initiative)
cli.add_command(deliverable)
cli.add_command(view)
cli.add_command(data)
cli.add_command(serve)
cli.add_command(config)


def main():
    load_dotenv()
    cli()


if __name__ == '__main__':
    main()
