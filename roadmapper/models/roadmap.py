"""
Roadmap aggregate model.

This is the exact shape persisted by local storage and exchanged by
import/export.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import Field

from roadmapper.constants import (
    DEFAULT_COLOR_THEME,
    DEFAULT_FONT_FAMILY,
    DEFAULT_ROADMAP_ID,
    DEFAULT_ROADMAP_TITLE,
    DEFAULT_VIEW_MONTHS,
)
from roadmapper.models.base import Deliverable, Goal, Initiative, RoadmapModel
from roadmapper.utils import now_iso

ColorTheme = Literal["blue", "green", "orange", "purple", "red", "teal", "slate"]


class RoadmapSettings(RoadmapModel):
    color_theme: ColorTheme = DEFAULT_COLOR_THEME
    font_family: str = DEFAULT_FONT_FAMILY
    view_start_date: Optional[date] = None
    view_months: int = Field(default=DEFAULT_VIEW_MONTHS, gt=0)


class Roadmap(RoadmapModel):
    """The full roadmap: three flat entity collections plus settings."""

    id: str = DEFAULT_ROADMAP_ID
    title: str = DEFAULT_ROADMAP_TITLE
    goals: List[Goal] = Field(default_factory=list)
    initiatives: List[Initiative] = Field(default_factory=list)
    deliverables: List[Deliverable] = Field(default_factory=list)
    settings: RoadmapSettings = Field(default_factory=RoadmapSettings)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def get_initiative(self, initiative_id: str) -> Optional[Initiative]:
        return next((i for i in self.initiatives if i.id == initiative_id), None)

    def get_deliverable(self, deliverable_id: str) -> Optional[Deliverable]:
        return next((d for d in self.deliverables if d.id == deliverable_id), None)

    def initiatives_for(self, goal_id: str) -> List[Initiative]:
        """Initiatives of a goal, sorted by order."""
        return sorted(
            (i for i in self.initiatives if i.goal_id == goal_id),
            key=lambda i: i.order,
        )

    def deliverables_for(self, initiative_id: str) -> List[Deliverable]:
        """Deliverables of an initiative, sorted by order."""
        return sorted(
            (d for d in self.deliverables if d.initiative_id == initiative_id),
            key=lambda d: d.order,
        )

    def goals_by_priority(self) -> List[Goal]:
        return sorted(self.goals, key=lambda g: g.priority)
