"""
Error taxonomy for the clinic agenda core.

Conflicts (past dates, double bookings) are NOT exceptions: they are ordinary
results returned by the conflict detector. The exceptions below cover input
the core cannot compute with at all.
"""


class AgendaError(Exception):
    """Base exception for all agenda-related errors."""
    pass


class InvalidTimeFormat(AgendaError, ValueError):
    """A wall-clock value is not a valid 'HH:MM' string."""

    def __init__(self, value, reason: str = "expected 'HH:MM'"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid time {value!r}: {reason}")


class NonPositiveDuration(AgendaError, ValueError):
    """An activity ends at or before the moment it starts."""

    def __init__(self, duration_minutes: int, activity_id=None):
        self.duration_minutes = duration_minutes
        self.activity_id = activity_id
        label = f" for activity {activity_id}" if activity_id is not None else ""
        super().__init__(f"Duration must be positive{label}, got {duration_minutes} min")


class InvalidStatusTransition(AgendaError):
    """Raised when an appointment status change is not allowed."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move appointment from '{current}' to '{requested}'")


class ActivityNotFound(AgendaError, KeyError):
    """The store holds no activity with the requested id."""

    def __init__(self, activity_id):
        self.activity_id = activity_id
        super().__init__(activity_id)

    def __str__(self):
        return f"Activity {self.activity_id!r} not found"
