"""
Request payload schemas for the CRUD API.

Create schemas require every mandatory field; update schemas make all
fields optional so a PATCH only carries what changed.
"""

from datetime import date
from typing import Optional

from pydantic import Field, field_validator, model_validator

from roadmapper.constants import VALIDATION_END_BEFORE_START
from roadmapper.models.base import DeliverableStatus, RoadmapModel


class GoalCreate(RoadmapModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    desired_outcome: str = Field(min_length=1)
    priority: int = Field(gt=0)
    order: int = Field(ge=0)


class GoalUpdate(RoadmapModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    desired_outcome: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[int] = Field(default=None, gt=0)
    order: Optional[int] = Field(default=None, ge=0)


class InitiativeCreate(RoadmapModel):
    goal_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    ideal_outcome: str = Field(min_length=1)
    order: int = Field(ge=0)


class InitiativeUpdate(RoadmapModel):
    goal_id: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    ideal_outcome: Optional[str] = Field(default=None, min_length=1)
    order: Optional[int] = Field(default=None, ge=0)


class _DeliverableDates(RoadmapModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def empty_date_is_none(cls, v):
        return None if v == "" else v

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(VALIDATION_END_BEFORE_START)
        return self


class DeliverableCreate(_DeliverableDates):
    initiative_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    status: DeliverableStatus
    order: int = Field(ge=0)


class DeliverableUpdate(_DeliverableDates):
    """Partial deliverable patch.

    An explicit ``null`` for a date clears it; an omitted date is left alone.
    Use ``model_dump(exclude_unset=True)`` to tell the two apart.
    """

    initiative_id: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[DeliverableStatus] = None
    order: Optional[int] = Field(default=None, ge=0)
