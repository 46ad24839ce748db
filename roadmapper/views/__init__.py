"""
Views over a roadmap: nested edit list, markdown overview and text Gantt.
"""

from roadmapper.views.gantt_text import render_gantt
from roadmapper.views.markdown import generate_overview_markdown
from roadmapper.views.transform import (
    GoalNode,
    InitiativeNode,
    StatusCounts,
    build_nested_structure,
    deliverables_by_status,
)

__all__ = [
    "GoalNode",
    "InitiativeNode",
    "StatusCounts",
    "build_nested_structure",
    "deliverables_by_status",
    "generate_overview_markdown",
    "render_gantt",
]
