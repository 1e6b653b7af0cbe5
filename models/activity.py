"""
Activity data models for the clinic agenda.

An Activity is anything time-boxed on the calendar. It comes in two
variants selected by the `type` discriminator:
1. Appointment (a patient visit with a workflow status)
2. Event (a non-patient block, e.g. a course or a day off)
"""

from datetime import date as date_type
from enum import Enum
from typing import Annotated, Dict, FrozenSet, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from .errors import InvalidStatusTransition, NonPositiveDuration
from .timeutil import LAST_MINUTE, duration, format_minutes, to_minutes


class ActivityKind(str, Enum):
    """Discriminator values for the two activity variants."""
    APPOINTMENT = "appointment"
    EVENT = "event"


class AppointmentStatus(str, Enum):
    """Workflow state of an appointment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ATTENDED = "attended"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


STATUS_LABELS: Dict[AppointmentStatus, str] = {
    AppointmentStatus.PENDING: "Pendiente",
    AppointmentStatus.CONFIRMED: "Confirmado",
    AppointmentStatus.ATTENDED: "Atendido",
    AppointmentStatus.CANCELLED: "Cancelado",
}

# One-way moves only; attended and cancelled are terminal.
# Walk-ins must be confirmed before being marked attended: pending -> attended
# is rejected, although the clinic UI used to allow that shortcut.
ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.ATTENDED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.ATTENDED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


class ActivityBase(BaseModel):
    """
    Fields shared by every calendar item.
    Instances are treated as snapshots: the core reads them, never edits them.
    """

    # --- Core Identity ---
    id: str = Field(min_length=1, description="Opaque unique identifier")

    # --- Timing ---
    date: date_type = Field(description="Calendar day (no time component)")
    start_time: str = Field(description="Wall-clock start, 'HH:MM'")
    duration_minutes: int = Field(gt=0, description="Length of the activity in minutes")

    # --- Resource Binding ---
    resource_id: Optional[str] = Field(
        default=None,
        description="Doctor the activity is bound to. None means unbound (never conflicts)"
    )

    notes: str = Field(default="", description="Free-text notes")

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v):
        # Raises InvalidTimeFormat (a ValueError), surfaced as a ValidationError.
        to_minutes(v)
        return v

    @field_validator("resource_id", mode="before")
    @classmethod
    def blank_resource_is_unbound(cls, v):
        """Forms submit '' for 'no doctor'."""
        if v == "":
            return None
        return v

    @model_validator(mode="after")
    def validate_same_day(self):
        """Activities never run past midnight."""
        if self.end_minutes > LAST_MINUTE:
            raise ValueError("Activity cannot end after 23:59 (no activities span midnight)")
        return self

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def end_time(self) -> str:
        return format_minutes(self.end_minutes)

    @property
    def is_bound(self) -> bool:
        return self.resource_id is not None

    @classmethod
    def from_span(cls, start_time: str, end_time: str, **fields):
        """
        Build an activity from the start/end pair a form submits.
        The duration is derived as end - start and must be positive.
        """
        minutes = duration(start_time, end_time)
        if minutes <= 0:
            raise NonPositiveDuration(minutes, fields.get("id"))
        return cls(start_time=start_time, duration_minutes=minutes, **fields)


class Appointment(ActivityBase):
    """A patient visit bound (usually) to one doctor."""

    type: Literal["appointment"] = "appointment"

    patient_id: Optional[str] = Field(default=None, description="Patient reference")
    patient_name: str = Field(default="Sin paciente", description="Display name of the patient")
    treatment: str = Field(default="Consulta", description="Service or reason for the visit")
    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING, description="Workflow state")

    @property
    def kind(self) -> ActivityKind:
        return ActivityKind.APPOINTMENT

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED

    def can_transition(self, new_status: AppointmentStatus) -> bool:
        return AppointmentStatus(new_status) in ALLOWED_TRANSITIONS[self.status]

    def transition(self, new_status: AppointmentStatus) -> "Appointment":
        """Return a copy in the new status, or raise if the move is not allowed."""
        new_status = AppointmentStatus(new_status)
        if not self.can_transition(new_status):
            raise InvalidStatusTransition(self.status.value, new_status.value)
        return self.model_copy(update={"status": new_status})

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "type": "appointment",
            "id": "apt_0142",
            "date": "2026-02-14",
            "start_time": "14:00",
            "duration_minutes": 60,
            "resource_id": "doc_01",
            "patient_id": "pat_0031",
            "patient_name": "Ana Quispe",
            "treatment": "Endodoncia",
            "status": "confirmed"
        }
    })


class Event(ActivityBase):
    """A non-patient block on the calendar. Has no workflow status."""

    type: Literal["event"] = "event"

    title: str = Field(default="Evento", min_length=1, description="Display title")
    color: str = Field(default="#ef4444", description="Card color (red is reserved for events)")
    all_day: bool = Field(default=False, description="Blocks the whole day (00:00-23:59)")

    @property
    def kind(self) -> ActivityKind:
        return ActivityKind.EVENT

    @property
    def is_cancelled(self) -> bool:
        return False

    @classmethod
    def whole_day(cls, **fields) -> "Event":
        """An all-day block, capped at 23:59 so it never crosses midnight."""
        return cls(start_time="00:00", duration_minutes=LAST_MINUTE, all_day=True, **fields)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "type": "event",
            "id": "evt_007",
            "date": "2026-02-14",
            "start_time": "08:00",
            "duration_minutes": 120,
            "resource_id": None,
            "title": "Curso de implantes",
            "color": "#ef4444",
            "all_day": False
        }
    })


Activity = Annotated[Union[Appointment, Event], Field(discriminator="type")]

# Parses raw dicts into the right variant based on `type`.
activity_adapter: TypeAdapter = TypeAdapter(Activity)


def parse_activity(data: dict) -> Union[Appointment, Event]:
    return activity_adapter.validate_python(data)
