"""
Resource data models for the clinic agenda.

A resource is a staff member (doctor) whose time is scheduled.
At most one bound activity may occupy a given instant per doctor.
"""

from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field

INDIGO = "#6366f1"
DEFAULT_DOCTOR_COLOR = "#3b82f6"

# Shades of red are reserved for events on the calendar.
RESERVED_EVENT_COLORS: FrozenSet[str] = frozenset({
    "#ef4444", "#dc2626", "#b91c1c", "#f87171", "#ff0000", "red",
})


class Doctor(BaseModel):
    """Human resource the calendar schedules against."""
    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Display name")
    color: str = Field(default=DEFAULT_DOCTOR_COLOR, description="Calendar card color")

    @property
    def display_color(self) -> str:
        """Card color, swapping reserved event reds for indigo."""
        c = self.color.strip().lower()
        if c in RESERVED_EVENT_COLORS:
            return INDIGO
        return self.color

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": "doc_01",
            "name": "Dra. Lucia Ramos",
            "color": "#10b981"
        }
    })
