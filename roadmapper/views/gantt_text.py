"""
Plain-text rendering of the Gantt view for the terminal.

Each initiative row takes one line per lane. Bars are placed with the same
date-to-percent scale as the graphical timeline, so overlapping
deliverables never share a line.
"""

import math
from typing import List

from roadmapper.constants import DEFAULT_GANTT_WIDTH, DEFAULT_VIEW_MONTHS
from roadmapper.models.base import DeliverableStatus
from roadmapper.timeline.rows import GanttRow, group_rows_by_goal
from roadmapper.timeline.scale import DateLike, QuarterLabels, date_to_percent

LABEL_WIDTH = 24
BACKGROUND = "·"
BAR_CHARS = {
    DeliverableStatus.PLANNED: "░",
    DeliverableStatus.IN_PROGRESS: "▒",
    DeliverableStatus.SHIPPED: "█",
}


def _fit(text: str, width: int) -> str:
    if len(text) > width:
        return text[: max(width - 1, 0)] + "…"
    return text.ljust(width)


def _column(percent: float, width: int) -> float:
    return percent / 100 * width


def _header(view_start: DateLike, view_months: int, width: int) -> str:
    cells = [" "] * width
    for label in QuarterLabels(view_start, view_months):
        start = int(_column(label.start_percent, width))
        end = int(_column(label.start_percent + label.width_percent, width))
        text = f"|{label.label} {label.year}"[: max(end - start, 0)]
        for offset, char in enumerate(text):
            if start + offset < width:
                cells[start + offset] = char
    return " " * LABEL_WIDTH + "".join(cells)


def _lane_line(row: GanttRow, lane: int, view_start: DateLike, view_months: int, width: int) -> str:
    cells = [BACKGROUND] * width
    for deliverable in row.scheduled:
        if deliverable.stack_index != lane:
            continue
        start_pct = date_to_percent(deliverable.start_date, view_start, view_months)
        end_pct = date_to_percent(deliverable.end_date, view_start, view_months)
        if end_pct < 0 or start_pct > 100:
            continue
        start = max(0, math.floor(_column(start_pct, width)))
        end = min(width, math.ceil(_column(end_pct, width)))
        # Zero-length ranges still get a visible cell
        end = max(end, min(start + 1, width))
        for col in range(start, end):
            cells[col] = BAR_CHARS[DeliverableStatus(deliverable.status)]
    return "".join(cells)


def render_gantt(
    rows: List[GanttRow],
    view_start: DateLike,
    view_months: int = DEFAULT_VIEW_MONTHS,
    width: int = DEFAULT_GANTT_WIDTH,
) -> str:
    """
    Draw the Gantt rows as text.

    Args:
        rows: Output of build_gantt_rows.
        view_start: First day of the viewing window.
        view_months: Window length in months.
        width: Number of characters for the timeline area.

    Returns:
        The rendered chart, lines joined with newlines.
    """
    lines = [_header(view_start, view_months, width)]

    for goal, goal_rows in group_rows_by_goal(rows):
        lines.append(f"[P{goal.priority}] {goal.name}")
        for row in goal_rows:
            if row.is_placeholder:
                lines.append(_fit(f"  ({row.initiative.name})", LABEL_WIDTH) + BACKGROUND * width)
                continue
            for lane in range(row.max_stack_index + 1 or 1):
                label = f"  {row.initiative.name}" if lane == 0 else ""
                lines.append(
                    _fit(label, LABEL_WIDTH) + _lane_line(row, lane, view_start, view_months, width)
                )
            if row.unscheduled:
                names = ", ".join(d.name for d in row.unscheduled)
                lines.append(_fit("", LABEL_WIDTH) + f"needs dates: {names}")

    legend = "  ".join(f"{char} {status.value}" for status, char in BAR_CHARS.items())
    lines.extend(["", legend])
    return "\n".join(lines)
