"""
Interval stacking for the Gantt view.

Assigns each scheduled deliverable a vertical lane so that bars sharing a
lane never overlap. Greedy interval partitioning: the lane count equals the
maximum number of deliverables active at any instant.
"""

from typing import Iterable, List

from roadmapper.models.base import Deliverable


class StackedDeliverable(Deliverable):
    """A scheduled deliverable with its lane assignment."""

    stack_index: int = 0


def stack_deliverables(deliverables: Iterable[Deliverable]) -> List[StackedDeliverable]:
    """Assign lanes to scheduled deliverables.

    Unscheduled deliverables are skipped. Items are sorted by start date
    (stable, so ties keep input order) and each goes into the first lane whose
    last end date is on or before its start date. The result is deterministic
    for a given input order but not canonical across orderings.

    Args:
        deliverables: Deliverables of one initiative (or any grouping).

    Returns:
        Stacked deliverables in start-date order.
    """
    scheduled = sorted(
        (d for d in deliverables if d.is_scheduled),
        key=lambda d: d.start_date,
    )

    lane_ends = []
    stacked: List[StackedDeliverable] = []

    for deliverable in scheduled:
        lane = next(
            (i for i, end in enumerate(lane_ends) if end <= deliverable.start_date),
            None,
        )
        if lane is None:
            lane = len(lane_ends)
            lane_ends.append(deliverable.end_date)
        else:
            lane_ends[lane] = deliverable.end_date

        stacked.append(
            StackedDeliverable(**deliverable.model_dump(), stack_index=lane)
        )

    return stacked


def max_stack_index(stacked: Iterable[StackedDeliverable]) -> int:
    """Highest lane in use, or -1 when there are no bars."""
    return max((d.stack_index for d in stacked), default=-1)


def lane_count(stacked: Iterable[StackedDeliverable]) -> int:
    return max_stack_index(stacked) + 1
