"""
View commands: the edit list, the Gantt timeline and the overview export.
"""
from datetime import date
from pathlib import Path
from typing import Optional

import click

from roadmapper.commands.common import cli_errors, echo_json, get_core, to_iso_date
from roadmapper.constants import get_gantt_width
from roadmapper.models.base import DeliverableStatus
from roadmapper.timeline.rows import RowLayout, build_gantt_rows
from roadmapper.views import (
    build_nested_structure,
    deliverables_by_status,
    generate_overview_markdown,
    render_gantt,
)

STATUS_ICONS = {
    DeliverableStatus.SHIPPED: "✓",
    DeliverableStatus.IN_PROGRESS: "⏳",
    DeliverableStatus.PLANNED: "·",
}


@click.group()
def view():
    """Render the roadmap."""
    pass


@view.command(name="edit")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def edit_view(ctx, json_output: bool):
    """Show the full hierarchy with ids, as used for editing."""
    core = get_core(ctx)
    with cli_errors():
        roadmap = core.load()
    nested = build_nested_structure(roadmap)
    counts = deliverables_by_status(roadmap)

    if json_output:
        echo_json({
            "title": roadmap.title,
            "goals": [node.to_json() for node in nested],
            "counts": {
                "shipped": counts.shipped,
                "inProgress": counts.in_progress,
                "planned": counts.planned,
                "total": counts.total,
            },
        })
        return

    click.echo(roadmap.title)
    click.echo("=" * len(roadmap.title))
    for node in nested:
        g = node.goal
        click.echo(f"\n[P{g.priority}] {g.name}  ({g.id})")
        if not node.initiatives:
            click.echo("  (no initiatives)")
        for child in node.initiatives:
            click.echo(f"  - {child.initiative.name}  ({child.initiative.id})")
            for d in child.deliverables:
                dates = f" {d.start_date} → {d.end_date}" if d.is_scheduled else ""
                click.echo(f"      {STATUS_ICONS[DeliverableStatus(d.status)]} {d.name}{dates}  ({d.id})")

    click.echo(
        f"\n{counts.total} deliverable(s): {counts.shipped} shipped, "
        f"{counts.in_progress} in progress, {counts.planned} planned"
    )


@view.command(name="gantt")
@click.option("--start", help="First day of the window (default: settings, else first of this month).")
@click.option("--months", type=click.IntRange(min=1), help="Window length in months.")
@click.option("--width", type=click.IntRange(min=12), help="Timeline width in characters.")
@click.pass_context
def gantt_view(ctx, start: Optional[str], months: Optional[int], width: Optional[int]):
    """Draw the timeline with overlapping deliverables on separate lanes."""
    core = get_core(ctx)
    with cli_errors():
        roadmap = core.load()

    settings = roadmap.settings
    if start:
        view_start = date.fromisoformat(to_iso_date(start, "--start"))
    elif settings.view_start_date:
        view_start = settings.view_start_date
    else:
        view_start = date.today().replace(day=1)
    view_months = months or settings.view_months

    rows = build_gantt_rows(roadmap, RowLayout.from_config(core.config))
    if not rows:
        click.echo("No goals to display.")
        return
    click.echo(render_gantt(rows, view_start, view_months, width or get_gantt_width(core.config)))


@view.command(name="overview")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write to a file.")
@click.pass_context
def overview_view(ctx, output: Optional[Path]):
    """Export the goal/initiative/deliverable overview as markdown."""
    core = get_core(ctx)
    with cli_errors():
        roadmap = core.load()
    markdown = generate_overview_markdown(roadmap)

    if output:
        output.write_text(markdown + "\n")
        click.echo(f"Overview written to {output}.")
    else:
        click.echo(markdown)
