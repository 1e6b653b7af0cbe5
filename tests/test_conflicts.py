from datetime import date, datetime

import pytest

from agenda.conflicts import (
    ConflictChecker,
    DoubleBookingConflict,
    PastDateConflict,
    check_conflict,
    find_conflicts,
)
from models import ActivityKind, AppointmentStatus
from conftest import BEFORE_CLINIC_DAY, make_appointment, make_event


def check(candidate, existing, **kwargs):
    kwargs.setdefault("now", BEFORE_CLINIC_DAY)
    return check_conflict(candidate, existing, **kwargs)


# --- Resource overlap ---

def test_back_to_back_activities_do_not_conflict():
    a = make_appointment("a", "09:00", "09:30")
    b = make_appointment("b", "09:30", "10:00")
    assert check(b, [a]) is None


def test_one_minute_overlap_conflicts():
    a = make_appointment("a", "09:00", "09:30")
    b = make_appointment("b", "09:29", "10:00")
    result = check(b, [a])
    assert isinstance(result, DoubleBookingConflict)
    assert result.conflicting_activity_id == "a"


def test_double_booking_scenario_for_same_doctor():
    existing = make_appointment("apt_1400", "14:00", "15:00", resource_id="doc_D")
    candidate = make_appointment("apt_new", "14:30", "15:30", resource_id="doc_D")

    result = check(candidate, [existing])

    assert result.kind == "DoubleBooking"
    assert result.conflicting_activity_id == "apt_1400"
    assert result.conflicting_start_time == "14:00"
    assert result.conflicting_type == ActivityKind.APPOINTMENT
    assert result.to_dict() == {
        "kind": "DoubleBooking",
        "conflictingActivityId": "apt_1400",
        "conflictingStartTime": "14:00",
        "conflictingType": "appointment",
    }


def test_same_slot_for_another_doctor_is_accepted():
    existing = make_appointment("apt_1400", "14:00", "15:00", resource_id="doc_D")
    candidate = make_appointment("apt_new", "14:30", "15:30", resource_id="doc_E")
    assert check(candidate, [existing]) is None


def test_different_date_does_not_conflict():
    existing = make_appointment("a", "14:00", "15:00", day=date(2026, 2, 15))
    candidate = make_appointment("b", "14:00", "15:00")
    assert check(candidate, [existing]) is None


def test_event_bound_to_doctor_blocks_appointments():
    course = make_event("evt", "08:00", "12:00", resource_id="doc_01", title="Curso")
    candidate = make_appointment("b", "11:00", "11:30")

    result = check(candidate, [course])

    assert result.conflicting_type == ActivityKind.EVENT
    assert "Evento" in result.message


def test_unbound_candidate_never_double_books():
    bound = make_appointment("a", "09:00", "10:00")
    unbound_evt = make_event("e1", "09:00", "10:00")
    candidate = make_event("e2", "09:15", "09:45")
    assert check(candidate, [bound, unbound_evt]) is None


def test_unbound_existing_activity_does_not_block_a_doctor():
    unbound_evt = make_event("e1", "09:00", "10:00")
    candidate = make_appointment("b", "09:15", "09:45")
    assert check(candidate, [unbound_evt]) is None


def test_candidate_is_excluded_from_its_own_scan():
    original = make_appointment("a", "09:00", "10:00")
    moved = make_appointment("a", "09:30", "10:30")
    assert check(moved, [original], allow_past=True) is None


def test_cancelled_appointments_still_block_unless_filtered_out():
    cancelled = make_appointment("a", "09:00", "10:00", status=AppointmentStatus.CANCELLED)
    candidate = make_appointment("b", "09:00", "10:00")
    assert isinstance(check(candidate, [cancelled]), DoubleBookingConflict)


# --- Reporting strategy ---

def test_first_strategy_reports_insertion_order_match():
    later = make_appointment("later", "09:30", "10:30")
    earlier = make_appointment("earlier", "09:00", "10:00")
    candidate = make_appointment("c", "09:45", "10:15")

    result = check(candidate, [later, earlier])

    assert result.conflicting_activity_id == "later"


def test_earliest_strategy_reports_earliest_start():
    later = make_appointment("later", "09:30", "10:30")
    earlier = make_appointment("earlier", "09:00", "10:00")
    candidate = make_appointment("c", "09:45", "10:15")

    result = check(candidate, [later, earlier], strategy="earliest")

    assert result.conflicting_activity_id == "earlier"


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError):
        ConflictChecker("latest")


# --- Past dates ---

def test_past_candidate_is_rejected_for_new_activities():
    candidate = make_appointment("a", "09:00", "09:30", day=date(2026, 1, 10))

    result = check(candidate, [])

    assert isinstance(result, PastDateConflict)
    assert result.to_dict() == {"kind": "PastDate"}


def test_past_candidate_is_accepted_when_editing():
    candidate = make_appointment("a", "09:00", "09:30", day=date(2026, 1, 10))
    assert check(candidate, [], allow_past=True) is None


def test_past_rule_compares_time_of_day():
    now = datetime(2026, 2, 14, 10, 0)
    assert isinstance(check(make_appointment("a", "09:59", "10:30"), [], now=now), PastDateConflict)
    assert check(make_appointment("b", "10:00", "10:30"), [], now=now) is None


def test_past_rule_wins_over_double_booking():
    existing = make_appointment("a", "09:00", "10:00", day=date(2026, 1, 10))
    candidate = make_appointment("b", "09:00", "10:00", day=date(2026, 1, 10))
    assert isinstance(check(candidate, [existing]), PastDateConflict)


def test_edit_still_reports_double_booking():
    existing = make_appointment("a", "09:00", "10:00", day=date(2026, 1, 10))
    candidate = make_appointment("b", "09:30", "10:30", day=date(2026, 1, 10))
    assert isinstance(check(candidate, [existing], allow_past=True), DoubleBookingConflict)


# --- Auditing ---

def test_find_conflicts_lists_overlapping_pairs_per_doctor():
    a = make_appointment("a", "09:00", "10:00")
    b = make_appointment("b", "09:30", "10:30")
    c = make_appointment("c", "10:30", "11:00")
    other = make_appointment("d", "09:00", "10:00", resource_id="doc_02")
    loose = make_event("e", "09:00", "10:00")

    pairs = find_conflicts([a, b, c, other, loose])

    assert [(x.id, y.id) for x, y in pairs] == [("a", "b")]
