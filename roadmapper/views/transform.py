"""
Nested view of a roadmap for the edit list and overview export.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from roadmapper.models.base import Deliverable, DeliverableStatus, Goal, Initiative
from roadmapper.models.roadmap import Roadmap


@dataclass
class InitiativeNode:
    initiative: Initiative
    deliverables: List[Deliverable] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            **self.initiative.to_json(),
            "deliverables": [d.to_json() for d in self.deliverables],
        }


@dataclass
class GoalNode:
    goal: Goal
    initiatives: List[InitiativeNode] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            **self.goal.to_json(),
            "initiatives": [i.to_json() for i in self.initiatives],
        }


@dataclass(frozen=True)
class StatusCounts:
    shipped: int
    in_progress: int
    planned: int
    total: int


def build_nested_structure(roadmap: Roadmap) -> List[GoalNode]:
    """Goals by priority, each with its initiatives and their deliverables by order."""
    return [
        GoalNode(
            goal=goal,
            initiatives=[
                InitiativeNode(initiative, roadmap.deliverables_for(initiative.id))
                for initiative in roadmap.initiatives_for(goal.id)
            ],
        )
        for goal in roadmap.goals_by_priority()
    ]


def deliverables_by_status(roadmap: Roadmap) -> StatusCounts:
    statuses = [d.status for d in roadmap.deliverables]
    return StatusCounts(
        shipped=statuses.count(DeliverableStatus.SHIPPED),
        in_progress=statuses.count(DeliverableStatus.IN_PROGRESS),
        planned=statuses.count(DeliverableStatus.PLANNED),
        total=len(statuses),
    )
