"""
Gantt row building.

Joins goals, initiatives and deliverables into per-row render records,
combining lane stacking with layout metrics. Dangling references never
raise here; they simply produce rows with empty collections.
"""

from dataclasses import dataclass, field
from itertools import groupby
from typing import List, Optional, Tuple

from roadmapper.constants import (
    DEFAULT_BAR_GAP,
    DEFAULT_BAR_HEIGHT,
    DEFAULT_MIN_ROW_HEIGHT,
    DEFAULT_ROW_PADDING,
    DEFAULT_UNSCHEDULED_ROW_HEIGHT,
    EMPTY_INITIATIVE_NAME,
    EMPTY_INITIATIVE_PREFIX,
    ConfigManager,
    get_config_manager,
)
from roadmapper.models.base import Deliverable, Goal, Initiative
from roadmapper.models.roadmap import Roadmap
from roadmapper.timeline.stacking import (
    StackedDeliverable,
    max_stack_index,
    stack_deliverables,
)


@dataclass(frozen=True)
class RowLayout:
    """Pixel metrics used to size Gantt rows."""

    bar_height: int = DEFAULT_BAR_HEIGHT
    bar_gap: int = DEFAULT_BAR_GAP
    padding: int = DEFAULT_ROW_PADDING
    min_height: int = DEFAULT_MIN_ROW_HEIGHT
    unscheduled_height: int = DEFAULT_UNSCHEDULED_ROW_HEIGHT

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None) -> "RowLayout":
        config = config or get_config_manager()
        return cls(
            bar_height=config.get_int("bar_height", DEFAULT_BAR_HEIGHT),
            bar_gap=config.get_int("bar_gap", DEFAULT_BAR_GAP),
            padding=config.get_int("row_padding", DEFAULT_ROW_PADDING),
            min_height=config.get_int("min_row_height", DEFAULT_MIN_ROW_HEIGHT),
            unscheduled_height=config.get_int(
                "unscheduled_row_height", DEFAULT_UNSCHEDULED_ROW_HEIGHT
            ),
        )

    def row_height(self, max_stack_index: int) -> int:
        lanes_height = (max_stack_index + 1) * (self.bar_height + self.bar_gap) + self.padding
        return max(self.min_height, lanes_height)


def bar_top(stack_index: int, layout: RowLayout = RowLayout()) -> int:
    """Pixel offset of a bar from the top of its row."""
    return stack_index * (layout.bar_height + layout.bar_gap) + layout.padding // 2


@dataclass
class GanttRow:
    """One render row: a goal paired with one of its initiatives."""

    goal: Goal
    initiative: Initiative
    scheduled: List[StackedDeliverable] = field(default_factory=list)
    unscheduled: List[Deliverable] = field(default_factory=list)
    max_stack_index: int = -1
    row_height: int = DEFAULT_MIN_ROW_HEIGHT
    unscheduled_height: int = 0
    is_first_in_goal: bool = True
    is_last_in_goal: bool = True
    initiative_count_in_goal: int = 0
    offset_in_goal: int = 0
    is_placeholder: bool = False

    @property
    def total_height(self) -> int:
        return self.row_height + self.unscheduled_height


def placeholder_initiative(goal: Goal) -> Initiative:
    """Synthetic initiative standing in for a goal that has none."""
    return Initiative(
        id=f"{EMPTY_INITIATIVE_PREFIX}{goal.id}",
        goal_id=goal.id,
        name=EMPTY_INITIATIVE_NAME,
        ideal_outcome="",
        order=0,
    )


def build_gantt_rows(roadmap: Roadmap, layout: Optional[RowLayout] = None) -> List[GanttRow]:
    """Build Gantt rows in goal-priority, then initiative-order order.

    Args:
        roadmap: Roadmap to lay out.
        layout: Row metrics. Defaults to values from config.

    Returns:
        One row per (goal, initiative) pair, plus one placeholder row for
        every goal without initiatives.
    """
    layout = layout or RowLayout.from_config()
    rows: List[GanttRow] = []

    for goal in roadmap.goals_by_priority():
        initiatives = roadmap.initiatives_for(goal.id)
        count = len(initiatives)

        if not initiatives:
            rows.append(
                GanttRow(
                    goal=goal,
                    initiative=placeholder_initiative(goal),
                    row_height=layout.row_height(-1),
                    initiative_count_in_goal=0,
                    is_placeholder=True,
                )
            )
            continue

        offset = 0
        for index, initiative in enumerate(initiatives):
            deliverables = roadmap.deliverables_for(initiative.id)
            scheduled = stack_deliverables(deliverables)
            unscheduled = [d for d in deliverables if not d.is_scheduled]
            top_lane = max_stack_index(scheduled)

            row = GanttRow(
                goal=goal,
                initiative=initiative,
                scheduled=scheduled,
                unscheduled=unscheduled,
                max_stack_index=top_lane,
                row_height=layout.row_height(top_lane),
                unscheduled_height=layout.unscheduled_height if unscheduled else 0,
                is_first_in_goal=index == 0,
                is_last_in_goal=index == count - 1,
                initiative_count_in_goal=count,
                offset_in_goal=offset,
            )
            rows.append(row)
            offset += row.total_height

    return rows


def group_rows_by_goal(rows: List[GanttRow]) -> List[Tuple[Goal, List[GanttRow]]]:
    """Group consecutive rows by goal for sectioned rendering."""
    return [
        (group[0].goal, group)
        for group in (list(g) for _, g in groupby(rows, key=lambda r: r.goal.id))
    ]
