"""
Layout data models for the clinic agenda.

This module defines the 'Output' of the overlap layout engine:
where each activity sits horizontally inside its day column.
Nothing here is persisted; it is recomputed on every render.
"""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from .activity import Appointment, Event


class LaneAssignment(BaseModel):
    """Horizontal placement of one card, in percent of the day column width."""

    column_index: int = Field(ge=0, description="Lane the activity was placed in")
    column_count: int = Field(ge=1, description="Number of lanes in the activity's cluster")
    width_fraction: float = Field(gt=0, le=100, description="Card width (percent)")
    left_offset_fraction: float = Field(ge=0, lt=100, description="Card left edge (percent)")

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "column_index": 1,
            "column_count": 2,
            "width_fraction": 48.0,
            "left_offset_fraction": 48.0
        }
    })


class LayoutResult(BaseModel):
    """An activity paired with its lane assignment."""

    activity: Union[Appointment, Event] = Field(discriminator="type")
    lane: LaneAssignment

    @property
    def activity_id(self) -> str:
        return self.activity.id
