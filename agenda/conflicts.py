"""
Hard Constraint Validation Logic.

This module answers the binary question: "Can this activity be saved as-is?"
It enforces two rules before anything is persisted:
1. New activities cannot start in the past.
2. A doctor cannot run two activities at the same time.

Conflicts are returned as values, never raised: they are normal business
outcomes the caller turns into a message for the user.
"""

import logging
from dataclasses import dataclass, field
from datetime import date as date_type, datetime, time
from itertools import combinations
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from models import ActivityKind, Appointment, Event
from models.timeutil import overlaps, to_minutes

logger = logging.getLogger(__name__)

AnyActivity = Union[Appointment, Event]

STRATEGY_FIRST = "first"        # first conflicting item in insertion order
STRATEGY_EARLIEST = "earliest"  # earliest-starting conflicting item
STRATEGIES = (STRATEGY_FIRST, STRATEGY_EARLIEST)


@dataclass(frozen=True)
class PastDateConflict:
    """The candidate starts before the current wall-clock moment."""
    candidate_id: str
    date: date_type
    start_time: str
    kind: str = field(default="PastDate", init=False)

    @property
    def message(self) -> str:
        return "No se pueden crear citas ni eventos en el pasado."

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class DoubleBookingConflict:
    """The candidate overlaps another activity bound to the same doctor."""
    candidate_id: str
    resource_id: str
    conflicting_activity_id: str
    conflicting_start_time: str
    conflicting_type: ActivityKind
    kind: str = field(default="DoubleBooking", init=False)

    @property
    def message(self) -> str:
        label = "Evento" if self.conflicting_type == ActivityKind.EVENT else "Cita"
        return (
            "El doctor seleccionado ya tiene una actividad programada en este horario "
            f"({self.conflicting_start_time} - {label})."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "conflictingActivityId": self.conflicting_activity_id,
            "conflictingStartTime": self.conflicting_start_time,
            "conflictingType": self.conflicting_type.value,
        }


ConflictResult = Union[PastDateConflict, DoubleBookingConflict]


class ConflictChecker:
    """
    Validates a pending create/update against a snapshot of existing activities.
    Stateless: the same inputs always produce the same answer.
    """

    def __init__(self, strategy: str = STRATEGY_FIRST):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown conflict strategy {strategy!r}, expected one of {STRATEGIES}")
        self.strategy = strategy

    def check(
        self,
        candidate: AnyActivity,
        existing: Iterable[AnyActivity],
        allow_past: bool = False,
        now: Optional[datetime] = None
    ) -> Optional[ConflictResult]:
        """
        Master validation function. Returns None if valid, a conflict otherwise.
        Edits of existing activities pass allow_past=True.
        """
        # 1. Past-date rule (new activities only)
        if not allow_past:
            conflict = self._check_past(candidate, now or datetime.now())
            if conflict:
                return conflict

        # 2. Resource-overlap rule (unbound activities never conflict)
        if candidate.resource_id is None:
            return None

        return self._check_double_booking(candidate, existing)

    def _check_past(self, candidate: AnyActivity, now: datetime) -> Optional[PastDateConflict]:
        hours, minutes = divmod(candidate.start_minutes, 60)
        starts_at = datetime.combine(candidate.date, time(hours, minutes))
        if starts_at < now:
            return PastDateConflict(candidate.id, candidate.date, candidate.start_time)
        return None

    def _check_double_booking(
        self,
        candidate: AnyActivity,
        existing: Iterable[AnyActivity]
    ) -> Optional[DoubleBookingConflict]:
        c_start = to_minutes(candidate.start_time)
        c_end = to_minutes(candidate.end_time)

        best: Optional[Tuple[int, AnyActivity]] = None
        for item in existing:
            if item.id == candidate.id:
                continue  # self-exclusion for edit-in-place
            if item.resource_id is None or item.resource_id != candidate.resource_id:
                continue
            if item.date != candidate.date:
                continue

            i_start = to_minutes(item.start_time)
            i_end = i_start + item.duration_minutes
            if not overlaps(c_start, c_end, i_start, i_end):
                continue

            if self.strategy == STRATEGY_FIRST:
                best = (i_start, item)
                break
            if best is None or i_start < best[0]:
                best = (i_start, item)

        if best is None:
            return None

        hit = best[1]
        logger.debug(f"Candidate {candidate.id} clashes with {hit.id} for doctor {candidate.resource_id}")
        return DoubleBookingConflict(
            candidate_id=candidate.id,
            resource_id=candidate.resource_id,
            conflicting_activity_id=hit.id,
            conflicting_start_time=hit.start_time,
            conflicting_type=hit.kind,
        )


def check_conflict(
    candidate: AnyActivity,
    existing: Iterable[AnyActivity],
    allow_past: bool = False,
    now: Optional[datetime] = None,
    strategy: str = STRATEGY_FIRST
) -> Optional[ConflictResult]:
    """Convenience wrapper around ConflictChecker.check."""
    return ConflictChecker(strategy).check(candidate, existing, allow_past=allow_past, now=now)


def find_conflicts(activities: Iterable[AnyActivity]) -> List[Tuple[AnyActivity, AnyActivity]]:
    """
    Audit an already persisted set: every pair of bound activities that share
    a doctor and a date and whose intervals intersect.
    """
    by_key: Dict[Tuple[str, date_type], List[AnyActivity]] = {}
    for item in activities:
        if item.resource_id is None:
            continue
        by_key.setdefault((item.resource_id, item.date), []).append(item)

    pairs = []
    for group in by_key.values():
        for a, b in combinations(group, 2):
            if overlaps(a.start_minutes, a.end_minutes, b.start_minutes, b.end_minutes):
                pairs.append((a, b))
    return pairs
