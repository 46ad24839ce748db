"""
Goal commands: add, list, edit, delete and reprioritize goals.
"""
from typing import Optional

import click

from roadmapper.commands.common import cli_errors, echo_json, get_core


@click.group()
def goal():
    """Manage goals (top-level roadmap entries ordered by priority)."""
    pass


@goal.command(name="add")
@click.argument("name")
@click.option("-o", "--outcome", required=True, help="Desired outcome.")
@click.option("-d", "--desc", help="Goal description.")
@click.pass_context
def add_goal(ctx, name: str, outcome: str, desc: Optional[str]):
    """Add a goal at the lowest priority."""
    core = get_core(ctx)
    with cli_errors():
        created = core.run(lambda sync: sync.add_goal(name, desired_outcome=outcome, description=desc))
    click.echo(f"Goal '{created.name}' created with priority {created.priority} ({created.id}).")


@goal.command(name="list")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def list_goals(ctx, json_output: bool):
    """List goals by priority."""
    core = get_core(ctx)
    with cli_errors():
        roadmap = core.load()

    goals = roadmap.goals_by_priority()
    if json_output:
        echo_json([
            {**g.to_json(), "initiativeCount": len(roadmap.initiatives_for(g.id))}
            for g in goals
        ])
        return

    if not goals:
        click.echo("No goals yet. Add one with 'roadmap goal add'.")
        return
    for g in goals:
        count = len(roadmap.initiatives_for(g.id))
        click.echo(f"P{g.priority}  {g.name}  [{count} initiative(s)]  ({g.id})")


@goal.command(name="edit")
@click.argument("goal_id")
@click.option("-n", "--name", help="New name.")
@click.option("-o", "--outcome", help="New desired outcome.")
@click.option("-d", "--desc", help="New description.")
@click.pass_context
def edit_goal(ctx, goal_id: str, name: Optional[str], outcome: Optional[str], desc: Optional[str]):
    """Edit a goal. Only specified fields are updated."""
    changes = {}
    if name is not None:
        changes["name"] = name
    if outcome is not None:
        changes["desired_outcome"] = outcome
    if desc is not None:
        changes["description"] = desc
    if not changes:
        raise click.ClickException(
            "No update parameters provided. "
            "Specify at least one of: -n/--name, -o/--outcome, -d/--desc."
        )

    core = get_core(ctx)
    with cli_errors():
        updated = core.run(lambda sync: sync.update_goal(goal_id, **changes))
    click.echo(f"Goal '{updated.name}' updated successfully.")


@goal.command(name="delete")
@click.argument("goal_id")
@click.option("--cascade", is_flag=True, help="Also delete its initiatives and deliverables.")
@click.confirmation_option(prompt="Are you sure you want to delete this goal?")
@click.pass_context
def delete_goal(ctx, goal_id: str, cascade: bool):
    """Delete a goal. Goals below it move up one priority."""
    core = get_core(ctx)
    with cli_errors():
        core.run(lambda sync: sync.delete_goal(goal_id, cascade=cascade))
    click.echo(f"Goal '{goal_id}' deleted successfully.")


@goal.command(name="priority")
@click.argument("goal_id")
@click.argument("priority", type=int)
@click.pass_context
def set_priority(ctx, goal_id: str, priority: int):
    """Move a goal to PRIORITY, shifting the goals in between."""
    core = get_core(ctx)
    with cli_errors():
        core.run(lambda sync: sync.set_goal_priority(goal_id, priority))
    click.echo(f"Goal '{goal_id}' moved to priority {priority}.")
