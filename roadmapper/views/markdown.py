"""
Markdown export of the overview (slide) view.
"""

from typing import List, Optional

from roadmapper.models.base import DeliverableStatus
from roadmapper.models.roadmap import Roadmap
from roadmapper.views.transform import GoalNode, build_nested_structure

STATUS_LABELS = {
    DeliverableStatus.SHIPPED: "SHIPPED",
    DeliverableStatus.IN_PROGRESS: "IN PROGRESS",
    DeliverableStatus.PLANNED: "PLANNED",
}


def format_status(status: DeliverableStatus) -> str:
    return STATUS_LABELS[DeliverableStatus(status)]


def generate_overview_markdown(roadmap: Roadmap, nested: Optional[List[GoalNode]] = None) -> str:
    """
    Render the roadmap as markdown, one section per goal in priority order.

    Args:
        roadmap: Roadmap to export; supplies the title.
        nested: Pre-built nested structure. Built from the roadmap if omitted.

    Returns:
        The markdown document.
    """
    if nested is None:
        nested = build_nested_structure(roadmap)

    lines = [f"# {roadmap.title}", ""]

    for node in nested:
        goal = node.goal
        lines.extend(["---", "", f"## [P{goal.priority}] {goal.name}"])
        if goal.description:
            lines.extend([f"> {goal.description}", ""])
        lines.extend([f"**Desired Outcome:** {goal.desired_outcome}", ""])

        for child in node.initiatives:
            lines.append(f"### {child.initiative.name}")
            lines.extend([f"**Ideal Outcome:** {child.initiative.ideal_outcome}", ""])
            if child.deliverables:
                for deliverable in child.deliverables:
                    lines.append(f"- [{format_status(deliverable.status)}] {deliverable.name}")
                lines.append("")

    return "\n".join(lines)
