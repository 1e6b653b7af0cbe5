"""
Calendar View Model.

Orchestrates the conflict detector and the layout engine per rendered date
(month cell, day list, week grid), on top of a resource-visibility filter.
It reads snapshots from the store and only writes through it after a
candidate passed validation.
"""

import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date as date_type, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from models import Appointment, AppointmentStatus, Doctor, Event, LayoutResult
from .conflicts import ConflictChecker, ConflictResult, STRATEGY_FIRST
from .layout import LayoutEngine
from .store import ActivityStore

logger = logging.getLogger(__name__)

AnyActivity = Union[Appointment, Event]


def without_cancelled(activities: Iterable[AnyActivity]) -> List[AnyActivity]:
    """Drop cancelled appointments; they no longer hold their slot."""
    return [a for a in activities if not a.is_cancelled]


@dataclass
class VisibilityFilter:
    """
    Which doctors are currently shown, plus the toggle for unbound events.
    An empty selection hides every bound activity.
    """
    selected_doctors: Set[str] = field(default_factory=set)
    show_events: bool = True

    @classmethod
    def all_of(cls, doctors: Iterable[Doctor], show_events: bool = True) -> "VisibilityFilter":
        return cls(selected_doctors={d.id for d in doctors}, show_events=show_events)

    def toggle_doctor(self, doctor_id: str) -> None:
        if doctor_id in self.selected_doctors:
            self.selected_doctors.discard(doctor_id)
        else:
            self.selected_doctors.add(doctor_id)

    def is_visible(self, activity: AnyActivity) -> bool:
        if activity.resource_id is not None:
            return activity.resource_id in self.selected_doctors
        # Unbound: only events can be unbound in the UI, gated by the toggle.
        return isinstance(activity, Event) and self.show_events


@dataclass
class DoctorStatus:
    """Live status line for one doctor."""
    doctor: Doctor
    is_busy: bool
    current_task: str


class CalendarView:
    """
    Per-date view of the agenda.
    Layout is recomputed on every call; nothing is cached here.
    """

    def __init__(
        self,
        store: ActivityStore,
        visibility: Optional[VisibilityFilter] = None,
        engine: Optional[LayoutEngine] = None,
        strategy: str = STRATEGY_FIRST
    ):
        self.store = store
        self.visibility = visibility or VisibilityFilter.all_of(store.list_doctors())
        self.engine = engine or LayoutEngine()
        self.checker = ConflictChecker(strategy)

    # --- Rendering ---

    def items_for_date(self, day: date_type) -> List[AnyActivity]:
        """Visible appointments first, then visible events (unsorted)."""
        items = [a for a in self.store.list_activities() if a.date == day and self.visibility.is_visible(a)]
        appointments = [a for a in items if isinstance(a, Appointment)]
        events = [a for a in items if isinstance(a, Event)]
        return appointments + events

    def layout_for_date(self, day: date_type) -> List[LayoutResult]:
        return self.engine.layout_day(self.items_for_date(day))

    def week_layout(self, anchor: date_type) -> Dict[date_type, List[LayoutResult]]:
        """Lane assignments for each day of the Monday-first week holding anchor."""
        return {d: self.layout_for_date(d) for d in week_dates(anchor)}

    def month_cells(self, year: int, month: int) -> List[Dict[str, Any]]:
        """Month grid cells with the visible items of each date."""
        return [
            {"date": d, "in_month": d.month == month, "items": self.items_for_date(d)}
            for d in month_grid(year, month)
        ]

    # --- Validation & Writes ---

    def validate(
        self,
        candidate: AnyActivity,
        is_edit: bool = False,
        now: Optional[datetime] = None
    ) -> Optional[ConflictResult]:
        """
        Check a pending create/update. Edits skip the past-date rule.
        Cancelled appointments are filtered out: they free their slot.
        """
        existing = without_cancelled(self.store.list_activities())
        return self.checker.check(candidate, existing, allow_past=is_edit, now=now)

    def submit(
        self,
        candidate: AnyActivity,
        is_edit: bool = False,
        now: Optional[datetime] = None
    ) -> Optional[ConflictResult]:
        """Validate, then persist. Returns the conflict (nothing saved) or None."""
        conflict = self.validate(candidate, is_edit=is_edit, now=now)
        if conflict:
            logger.warning(f"Rejected {candidate.type} {candidate.id}: {conflict.kind}")
            return conflict

        self.store.save(candidate)
        logger.info(f"Saved {candidate.type} {candidate.id} on {candidate.date} at {candidate.start_time}")
        return None

    def change_status(self, appointment_id: str, new_status: AppointmentStatus) -> Appointment:
        """Apply a workflow transition. Does not re-run conflict detection."""
        current = self.store.get(appointment_id)
        if not isinstance(current, Appointment):
            raise TypeError(f"{appointment_id} is an event; events have no status")
        updated = current.transition(new_status)
        self.store.save(updated)
        return updated

    def delete(self, activity_id: str) -> None:
        self.store.delete(activity_id)

    @staticmethod
    def can_open_new(day: date_type, today: Optional[date_type] = None) -> bool:
        """The create form cannot be opened on a past date."""
        return day >= (today or date_type.today())

    # --- Dashboards ---

    def doctor_status(self, now: Optional[datetime] = None) -> List[DoctorStatus]:
        """
        Who is with a patient right now. Busy doctors first, then by name.
        """
        now = now or datetime.now()
        current_min = now.hour * 60 + now.minute
        today = [
            a for a in without_cancelled(self.store.list_activities())
            if isinstance(a, Appointment) and a.date == now.date()
        ]

        board = []
        for doc in self.store.list_doctors():
            active = next(
                (a for a in today
                 if a.resource_id == doc.id and a.start_minutes <= current_min < a.end_minutes),
                None
            )
            board.append(DoctorStatus(
                doctor=doc,
                is_busy=active is not None,
                current_task=active.treatment if active else "Libre",
            ))

        board.sort(key=lambda s: (not s.is_busy, s.doctor.name))
        return board

    def day_statistics(self, day: date_type) -> Dict[str, Any]:
        items = self.items_for_date(day)
        appointments = [a for a in items if isinstance(a, Appointment)]

        by_status: Dict[str, int] = {s.value: 0 for s in AppointmentStatus}
        per_doctor: Dict[str, int] = defaultdict(int)
        for apt in appointments:
            by_status[apt.status.value] += 1
            if apt.resource_id and not apt.is_cancelled:
                per_doctor[apt.resource_id] += 1

        busiest = max(per_doctor.items(), key=lambda x: x[1]) if per_doctor else None

        return {
            "date": day,
            "appointments": len(appointments),
            "events": len(items) - len(appointments),
            "by_status": by_status,
            "busiest_doctor": busiest,
        }


def week_dates(anchor: date_type) -> List[date_type]:
    """The seven dates (Monday..Sunday) of the week containing anchor."""
    monday = anchor - timedelta(days=anchor.weekday())
    return [monday + timedelta(days=i) for i in range(7)]


def month_grid(year: int, month: int) -> List[date_type]:
    """
    Dates of a Monday-first month grid, padded with neighbouring-month days
    so the grid is made of whole weeks.
    """
    cal = calendar.Calendar(firstweekday=calendar.MONDAY)
    return [d for week in cal.monthdatescalendar(year, month) for d in week]
