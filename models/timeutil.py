"""
Wall-clock arithmetic for the agenda.

All times are naive local 'HH:MM' strings with minute precision.
Nothing in here crosses midnight: the clinic does not book activities that
span two calendar days.
"""

import re

from .errors import InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60
LAST_MINUTE = MINUTES_PER_DAY - 1  # 23:59

# str.isdigit() also accepts superscripts and non-Latin digits.
_ASCII_DIGITS = re.compile(r"[0-9]{1,2}")


def to_minutes(value: str) -> int:
    """Convert 'HH:MM' into minutes since midnight."""
    if not isinstance(value, str):
        raise InvalidTimeFormat(value, "not a string")

    parts = value.strip().split(":")
    if len(parts) != 2:
        raise InvalidTimeFormat(value)

    hours_txt, minutes_txt = parts
    if not (_ASCII_DIGITS.fullmatch(hours_txt) and _ASCII_DIGITS.fullmatch(minutes_txt)):
        raise InvalidTimeFormat(value, "hours and minutes must be numeric")

    hours, minutes = int(hours_txt), int(minutes_txt)
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(value, "out of range")

    return hours * 60 + minutes


def format_minutes(total: int) -> str:
    """Inverse of to_minutes. Refuses values outside a single day."""
    if total < 0 or total > LAST_MINUTE:
        raise ValueError(f"{total} min is outside a single day (00:00-23:59)")
    return f"{total // 60:02d}:{total % 60:02d}"


def duration(start: str, end: str) -> int:
    """
    Minutes between two wall-clock times.
    Negative when end precedes start; callers treat <= 0 as invalid input.
    """
    return to_minutes(end) - to_minutes(start)


def add_minutes(start: str, delta_minutes: int) -> str:
    """
    Shift a wall-clock time, carrying across hour boundaries.
    Raises ValueError instead of wrapping past midnight.
    """
    return format_minutes(to_minutes(start) + delta_minutes)


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval intersection: touching endpoints do not overlap."""
    return start_a < end_b and end_a > start_b
