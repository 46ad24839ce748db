"""
Initiative commands.
"""
from typing import Optional

import click

from roadmapper.commands.common import cli_errors, get_core


@click.group()
def initiative():
    """Manage initiatives (grouped under goals)."""
    pass


@initiative.command(name="add")
@click.argument("goal_id")
@click.argument("name")
@click.option("-o", "--outcome", required=True, help="Ideal outcome.")
@click.pass_context
def add_initiative(ctx, goal_id: str, name: str, outcome: str):
    """Add an initiative under GOAL_ID."""
    core = get_core(ctx)
    with cli_errors():
        created = core.run(lambda sync: sync.add_initiative(goal_id, name, ideal_outcome=outcome))
    click.echo(f"Initiative '{created.name}' created ({created.id}).")


@initiative.command(name="edit")
@click.argument("initiative_id")
@click.option("-n", "--name", help="New name.")
@click.option("-o", "--outcome", help="New ideal outcome.")
@click.pass_context
def edit_initiative(ctx, initiative_id: str, name: Optional[str], outcome: Optional[str]):
    """Edit an initiative. Only specified fields are updated."""
    changes = {}
    if name is not None:
        changes["name"] = name
    if outcome is not None:
        changes["ideal_outcome"] = outcome
    if not changes:
        raise click.ClickException(
            "No update parameters provided. Specify at least one of: -n/--name, -o/--outcome."
        )

    core = get_core(ctx)
    with cli_errors():
        updated = core.run(lambda sync: sync.update_initiative(initiative_id, **changes))
    click.echo(f"Initiative '{updated.name}' updated successfully.")


@initiative.command(name="delete")
@click.argument("initiative_id")
@click.option("--cascade", is_flag=True, help="Also delete its deliverables.")
@click.confirmation_option(prompt="Are you sure you want to delete this initiative?")
@click.pass_context
def delete_initiative(ctx, initiative_id: str, cascade: bool):
    """Delete an initiative."""
    core = get_core(ctx)
    with cli_errors():
        core.run(lambda sync: sync.delete_initiative(initiative_id, cascade=cascade))
    click.echo(f"Initiative '{initiative_id}' deleted successfully.")


@initiative.command(name="move")
@click.argument("initiative_id")
@click.argument("goal_id")
@click.pass_context
def move_initiative(ctx, initiative_id: str, goal_id: str):
    """Move an initiative under another goal."""
    core = get_core(ctx)
    with cli_errors():
        moved = core.run(lambda sync: sync.move_initiative(initiative_id, goal_id))
    click.echo(f"Initiative '{moved.name}' moved to goal '{goal_id}'.")
