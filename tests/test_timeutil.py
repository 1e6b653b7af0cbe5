import pytest

from models.errors import InvalidTimeFormat
from models.timeutil import add_minutes, duration, format_minutes, overlaps, to_minutes


def test_to_minutes_parses_hours_and_minutes():
    assert to_minutes("00:00") == 0
    assert to_minutes("09:30") == 570
    assert to_minutes("23:59") == 1439


@pytest.mark.parametrize("bad", [
    "0930", "09:30:00", "ab:cd", "", "9:", "-1:30", "24:00", "12:60",
    "\u00b2:00", "12:\u00b30", "\u0660\u0669:\u0663\u0660", "\uff10\uff19:30", "009:30",
])
def test_to_minutes_rejects_malformed_values(bad):
    with pytest.raises(InvalidTimeFormat):
        to_minutes(bad)


def test_to_minutes_rejects_non_strings():
    with pytest.raises(InvalidTimeFormat):
        to_minutes(None)


def test_invalid_time_format_is_a_value_error():
    with pytest.raises(ValueError):
        to_minutes("noon")


def test_duration_can_be_negative():
    assert duration("09:00", "09:45") == 45
    assert duration("10:00", "09:30") == -30
    assert duration("10:00", "10:00") == 0


def test_add_minutes_carries_across_hours():
    assert add_minutes("09:45", 30) == "10:15"
    assert add_minutes("13:00", 0) == "13:00"
    assert add_minutes("10:15", -30) == "09:45"


def test_add_minutes_does_not_wrap_past_midnight():
    with pytest.raises(ValueError):
        add_minutes("23:30", 45)


def test_format_minutes_pads_values():
    assert format_minutes(65) == "01:05"


def test_overlaps_is_half_open():
    assert overlaps(540, 570, 569, 600)
    assert not overlaps(540, 570, 570, 600)
    assert not overlaps(570, 600, 540, 570)
