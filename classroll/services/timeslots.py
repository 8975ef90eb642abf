# classroll/services/timeslots.py
"""Time-of-day handling for session windows.

Windows are compared as minutes since midnight, never as strings: "9:00"
and "09:00" are the same instant and both sort before "10:00".
"""
import re

from classroll.core.errors import ValidationError

_TIME_RE = re.compile(r"^\s*([01]?\d|2[0-3]):([0-5]\d)\s*$")


def to_minutes(value) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < 24 * 60:
            return value
        raise ValidationError(f"Time out of range: {value}")
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def window(start: int, end: int) -> str:
    return f"{to_hhmm(start)}-{to_hhmm(end)}"


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # half-open [start, end)
    return a_start < b_end and a_end > b_start


def parse_window(start, end):
    start_minutes = to_minutes(start)
    end_minutes = to_minutes(end)
    if start_minutes >= end_minutes:
        raise ValidationError(
            f"Start time {to_hhmm(start_minutes)} must be before end time {to_hhmm(end_minutes)}"
        )
    return start_minutes, end_minutes
