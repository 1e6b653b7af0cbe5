import json
import shutil
from datetime import date, datetime
from pathlib import Path

import pytest

from agenda.store import ActivityStore, SessionCache
from models import Appointment, Event

SAMPLE_FILE = Path(__file__).resolve().parent.parent / "data" / "sample_agenda.json"

CLINIC_DAY = date(2026, 2, 14)
# Two weeks before CLINIC_DAY, so sample activities are in the future.
BEFORE_CLINIC_DAY = datetime(2026, 2, 1, 8, 0)


def make_appointment(id, start, end, resource_id="doc_01", day=CLINIC_DAY, **extra):
    return Appointment.from_span(start, end, id=id, date=day, resource_id=resource_id, **extra)


def make_event(id, start, end, resource_id=None, day=CLINIC_DAY, **extra):
    return Event.from_span(start, end, id=id, date=day, resource_id=resource_id, **extra)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def agenda_file(tmp_path):
    target = tmp_path / "agenda.json"
    shutil.copy(SAMPLE_FILE, target)
    return target


@pytest.fixture
def store(agenda_file, clock):
    return ActivityStore(str(agenda_file), cache=SessionCache(max_age_seconds=60, clock=clock))


@pytest.fixture
def write_agenda(tmp_path):
    """Write an arbitrary {'doctors': [...], 'activities': [...]} file."""
    def _write(payload, name="custom.json"):
        target = tmp_path / name
        target.write_text(json.dumps(payload), encoding="utf-8")
        return target
    return _write
