import pytest

from classroll.core.errors import ValidationError
from classroll.services.timeslots import overlaps, parse_window, to_hhmm, to_minutes


@pytest.mark.parametrize("value, minutes", [
    ("00:00", 0),
    ("09:00", 540),
    ("9:00", 540),
    ("9:05", 545),
    ("10:30", 630),
    ("23:59", 1439),
    (" 08:15 ", 495),
])
def test_to_minutes(value, minutes):
    assert to_minutes(value) == minutes


@pytest.mark.parametrize("value", ["24:00", "9:60", "0900", "9h00", "", "ab:cd", None])
def test_to_minutes_rejects_malformed(value):
    with pytest.raises(ValidationError):
        to_minutes(value)


def test_to_hhmm_is_zero_padded():
    assert to_hhmm(540) == "09:00"
    assert to_hhmm(5) == "00:05"


def test_single_digit_hour_sorts_before_double_digit():
    # "9:00" > "10:00" as strings, but not as times
    assert "9:00" > "10:00"
    assert to_minutes("9:00") < to_minutes("10:00")


def test_overlaps_is_half_open():
    assert overlaps(540, 660, 600, 720)
    assert overlaps(540, 660, 540, 660)
    assert overlaps(540, 720, 600, 630)
    assert not overlaps(540, 660, 660, 720)
    assert not overlaps(660, 720, 540, 660)


def test_parse_window_requires_start_before_end():
    assert parse_window("9:00", "11:00") == (540, 660)
    with pytest.raises(ValidationError):
        parse_window("11:00", "11:00")
    with pytest.raises(ValidationError):
        parse_window("12:00", "9:30")
