"""
Data commands: export, import and reset the stored roadmap.
"""
from pathlib import Path

import click

from roadmapper.commands.common import cli_errors, get_core


@click.group()
def data():
    """Export, import or reset roadmap data."""
    pass


@data.command(name="export")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_data(ctx, destination: Path):
    """Write the roadmap to DESTINATION as JSON."""
    core = get_core(ctx)
    with cli_errors():
        roadmap = core.load()
        core.storage.export_roadmap(destination, roadmap)
    click.echo(
        f"Exported {len(roadmap.goals)} goal(s), {len(roadmap.initiatives)} initiative(s) "
        f"and {len(roadmap.deliverables)} deliverable(s) to {destination}."
    )


def _require_local(core) -> None:
    if core.is_remote:
        raise click.ClickException(
            "This command only works on local data. Drop --remote / ROADMAP_API_URL."
        )


@data.command(name="import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_data(ctx, source: Path):
    """Replace the local roadmap with the contents of SOURCE."""
    core = get_core(ctx)
    _require_local(core)
    with cli_errors():
        roadmap = core.storage.import_roadmap(source)
    click.echo(f"Imported '{roadmap.title}' from {source}.")


@data.command(name="reset")
@click.confirmation_option(prompt="This deletes all local roadmap data. Continue?")
@click.pass_context
def reset_data(ctx):
    """Delete the local roadmap."""
    core = get_core(ctx)
    _require_local(core)
    with cli_errors():
        core.storage.clear_roadmap()
    click.echo("Local roadmap data cleared.")
