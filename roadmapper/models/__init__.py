"""
Data models for Roadmapper.

Import models explicitly from their modules:
    from roadmapper.models.base import Goal, Initiative, Deliverable, DeliverableStatus
    from roadmapper.models.payloads import GoalCreate, GoalUpdate, etc.
    from roadmapper.models.roadmap import Roadmap, RoadmapSettings
    from roadmapper.models.files import ConfigFile
"""

from .base import Deliverable, DeliverableStatus, Goal, Initiative
from .roadmap import Roadmap, RoadmapSettings

__all__ = [
    "Deliverable",
    "DeliverableStatus",
    "Goal",
    "Initiative",
    "Roadmap",
    "RoadmapSettings",
]
