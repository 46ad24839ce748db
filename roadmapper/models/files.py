"""
File models for Roadmapper.

Models representing JSON files in the .roadmap/ directory other than the
roadmap blob itself.
"""

from typing import Dict, Literal

from pydantic import BaseModel, Field, field_validator

from roadmapper.constants import (
    DEFAULT_BAR_GAP,
    DEFAULT_BAR_HEIGHT,
    DEFAULT_FAILURE_POLICIES,
    DEFAULT_GANTT_WIDTH,
    DEFAULT_MIN_ROW_HEIGHT,
    DEFAULT_ROW_PADDING,
    DEFAULT_UNSCHEDULED_ROW_HEIGHT,
    DEFAULT_VIEW_MONTHS,
)

FailurePolicyName = Literal["rollback", "refetch"]


class ConfigFile(BaseModel):
    """Model for config.json file.

    Layout metrics and sync behaviour.
    """

    schema_version: str = "1.0.0"

    # Gantt layout settings
    bar_height: int = Field(default=DEFAULT_BAR_HEIGHT, gt=0)
    bar_gap: int = Field(default=DEFAULT_BAR_GAP, ge=0)
    row_padding: int = Field(default=DEFAULT_ROW_PADDING, ge=0)
    min_row_height: int = Field(default=DEFAULT_MIN_ROW_HEIGHT, gt=0)
    unscheduled_row_height: int = Field(default=DEFAULT_UNSCHEDULED_ROW_HEIGHT, gt=0)

    # Timeline settings
    view_months: int = Field(default=DEFAULT_VIEW_MONTHS, gt=0)
    gantt_width: int = Field(default=DEFAULT_GANTT_WIDTH, ge=12)

    # Sync settings
    failure_policies: Dict[str, FailurePolicyName] = Field(
        default_factory=lambda: dict(DEFAULT_FAILURE_POLICIES)
    )

    @field_validator("failure_policies")
    @classmethod
    def merge_default_policies(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Fill in kinds the file leaves out and reject unknown kinds."""
        unknown = set(v) - set(DEFAULT_FAILURE_POLICIES)
        if unknown:
            raise ValueError(f"Unknown entity kind(s): {', '.join(sorted(unknown))}")
        return {**DEFAULT_FAILURE_POLICIES, **v}

    def with_value(self, key: str, value: str) -> "ConfigFile":
        """Return a validated copy with one setting changed.

        ``failure_policies.<kind>`` addresses a single policy.

        Raises:
            KeyError: If the key names no setting.
            pydantic.ValidationError: If the value is invalid.
        """
        data = self.model_dump()
        if key.startswith("failure_policies."):
            data["failure_policies"][key.split(".", 1)[1]] = value
        elif key in data and key != "schema_version":
            data[key] = value
        else:
            raise KeyError(key)
        return ConfigFile.model_validate(data)
