"""
Entity models for Roadmapper.

Goals, initiatives and deliverables form a strict three-level tree.
JSON field names are camelCase; Python attributes are snake_case.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from roadmapper.constants import VALIDATION_END_BEFORE_START


class DeliverableStatus(str, Enum):
    """Valid status values for deliverables."""

    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    SHIPPED = "shipped"


class RoadmapModel(BaseModel):
    """Common configuration for all roadmap models.

    Accepts both camelCase and snake_case on input and dumps camelCase
    when called with ``by_alias=True``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self, **kwargs) -> dict:
        """Dump to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class Goal(RoadmapModel):
    """Goal model - top-level roadmap entry, ordered by priority.

    Priorities form a dense 1..N sequence across all goals.
    """

    id: str
    name: str
    description: Optional[str] = None
    desired_outcome: str = ""
    priority: int = Field(default=1, ge=0)
    order: int = Field(default=0, ge=0)


class Initiative(RoadmapModel):
    """Initiative model - groups deliverables under a goal."""

    id: str
    goal_id: str
    name: str
    ideal_outcome: str = ""
    order: int = Field(default=0, ge=0)


class Deliverable(RoadmapModel):
    """Deliverable model - leaf entry with a status and an optional schedule.

    A deliverable is scheduled only when both dates are present.
    """

    id: str
    initiative_id: str
    name: str
    description: Optional[str] = None
    status: DeliverableStatus = DeliverableStatus.PLANNED
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    order: int = Field(default=0, ge=0)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def empty_date_is_none(cls, v):
        """Treat empty strings as missing dates and trim datetimes to dates."""
        if v == "":
            return None
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    @model_validator(mode="after")
    def check_date_order(self) -> "Deliverable":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(VALIDATION_END_BEFORE_START)
        return self

    @property
    def is_scheduled(self) -> bool:
        return self.start_date is not None and self.end_date is not None
