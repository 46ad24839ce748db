"""
Deliverable commands.

Dates accept any supported format and are stored as YYYY-MM-DD.
"""
from typing import Optional

import click

from roadmapper.commands.common import cli_errors, get_core, to_iso_date
from roadmapper.constants import DEFAULT_STATUS, VALID_STATUSES


@click.group()
def deliverable():
    """Manage deliverables (scheduled work under initiatives)."""
    pass


@deliverable.command(name="add")
@click.argument("initiative_id")
@click.argument("name")
@click.option("-s", "--status", type=click.Choice(VALID_STATUSES), default=DEFAULT_STATUS, show_default=True)
@click.option("-d", "--desc", help="Deliverable description.")
@click.option("--start", help="Start date.")
@click.option("--end", help="End date.")
@click.pass_context
def add_deliverable(
    ctx,
    initiative_id: str,
    name: str,
    status: str,
    desc: Optional[str],
    start: Optional[str],
    end: Optional[str],
):
    """Add a deliverable under INITIATIVE_ID."""
    start_date = to_iso_date(start, "--start")
    end_date = to_iso_date(end, "--end")

    core = get_core(ctx)
    with cli_errors():
        created = core.run(lambda sync: sync.add_deliverable(
            initiative_id,
            name,
            status=status,
            description=desc,
            start_date=start_date,
            end_date=end_date,
        ))
    click.echo(f"Deliverable '{created.name}' created ({created.id}).")
    if not created.is_scheduled:
        click.echo("  ⚠ No dates set; it will show as unscheduled.", err=True)


@deliverable.command(name="edit")
@click.argument("deliverable_id")
@click.option("-n", "--name", help="New name.")
@click.option("-d", "--desc", help="New description.")
@click.option("-s", "--status", type=click.Choice(VALID_STATUSES), help="New status.")
@click.option("--start", help="New start date.")
@click.option("--end", help="New end date.")
@click.option("--clear-dates", is_flag=True, help="Remove both dates.")
@click.pass_context
def edit_deliverable(
    ctx,
    deliverable_id: str,
    name: Optional[str],
    desc: Optional[str],
    status: Optional[str],
    start: Optional[str],
    end: Optional[str],
    clear_dates: bool,
):
    """Edit a deliverable. Only specified fields are updated."""
    if clear_dates and (start or end):
        raise click.UsageError("--clear-dates cannot be combined with --start/--end.")

    changes = {}
    if name is not None:
        changes["name"] = name
    if desc is not None:
        changes["description"] = desc
    if status is not None:
        changes["status"] = status
    if start is not None:
        changes["start_date"] = to_iso_date(start, "--start")
    if end is not None:
        changes["end_date"] = to_iso_date(end, "--end")
    if clear_dates:
        changes["start_date"] = None
        changes["end_date"] = None
    if not changes:
        raise click.ClickException(
            "No update parameters provided. "
            "Specify at least one of: -n/--name, -d/--desc, -s/--status, --start, --end, --clear-dates."
        )

    core = get_core(ctx)
    with cli_errors():
        updated = core.run(lambda sync: sync.update_deliverable(deliverable_id, **changes))
    click.echo(f"Deliverable '{updated.name}' updated successfully.")


@deliverable.command(name="delete")
@click.argument("deliverable_id")
@click.confirmation_option(prompt="Are you sure you want to delete this deliverable?")
@click.pass_context
def delete_deliverable(ctx, deliverable_id: str):
    """Delete a deliverable."""
    core = get_core(ctx)
    with cli_errors():
        core.run(lambda sync: sync.delete_deliverable(deliverable_id))
    click.echo(f"Deliverable '{deliverable_id}' deleted successfully.")


@deliverable.command(name="move")
@click.argument("deliverable_id")
@click.argument("initiative_id")
@click.pass_context
def move_deliverable(ctx, deliverable_id: str, initiative_id: str):
    """Move a deliverable under another initiative."""
    core = get_core(ctx)
    with cli_errors():
        moved = core.run(lambda sync: sync.move_deliverable(deliverable_id, initiative_id))
    click.echo(f"Deliverable '{moved.name}' moved to initiative '{initiative_id}'.")
