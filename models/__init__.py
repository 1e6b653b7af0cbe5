"""
Data models package for the clinic agenda.

This package exports the three pillars of the data architecture:
1. Demand (Appointment, Event and their status workflow)
2. Supply (Doctor)
3. Output (LaneAssignment, LayoutResult)
"""

from .activity import (
    Activity,
    ActivityBase,
    ActivityKind,
    Appointment,
    AppointmentStatus,
    Event,
    ALLOWED_TRANSITIONS,
    activity_adapter,
    parse_activity
)

from .resource import (
    Doctor
)

from .layout import (
    LaneAssignment,
    LayoutResult
)

__all__ = [
    # --- Demand Models ---
    "Activity",
    "ActivityBase",
    "ActivityKind",
    "Appointment",
    "AppointmentStatus",
    "Event",
    "ALLOWED_TRANSITIONS",
    "activity_adapter",
    "parse_activity",

    # --- Resource Models ---
    "Doctor",

    # --- Output Models ---
    "LaneAssignment",
    "LayoutResult",
]
