"""
Timeline layout engine: lane stacking, date scale and Gantt rows.
"""

from roadmapper.timeline.rows import GanttRow, RowLayout, build_gantt_rows, group_rows_by_goal
from roadmapper.timeline.scale import (
    AxisLabel,
    MonthLabels,
    QuarterLabels,
    add_months,
    date_to_percent,
    percent_to_date,
)
from roadmapper.timeline.stacking import StackedDeliverable, max_stack_index, stack_deliverables

__all__ = [
    "AxisLabel",
    "GanttRow",
    "MonthLabels",
    "QuarterLabels",
    "RowLayout",
    "StackedDeliverable",
    "add_months",
    "build_gantt_rows",
    "date_to_percent",
    "group_rows_by_goal",
    "max_stack_index",
    "percent_to_date",
    "stack_deliverables",
]
