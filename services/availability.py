"""
Pure availability helpers: time parsing, the overlap predicate, court
bookability and the free-times computation.

Times are handled as minutes since midnight. Nothing here touches the
database; booking_service.py feeds these functions with rows it loaded.
"""
import re

from models.timeslot import WEEKDAYS
from services.errors import ValidationError

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def is_valid_hhmm(value) -> bool:
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None


def parse_hhmm(value) -> int:
    if not is_valid_hhmm(value):
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_hhmm(value) -> str:
    """'9:05' -> '09:05', so stored times compare and index consistently."""
    return format_hhmm(parse_hhmm(value))


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # Half-open ranges: 14:00-15:00 and 15:00-16:00 do not overlap.
    return a_start < b_end and b_start < a_end


def ranges_overlap(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    return overlaps(parse_hhmm(a_start), parse_hhmm(a_end), parse_hhmm(b_start), parse_hhmm(b_end))


def weekday_name(day) -> str:
    return WEEKDAYS[day.weekday()]


def is_court_bookable(court, day) -> bool:
    if not court.is_available:
        return False
    return not any(w.covers(day) for w in court.maintenance_windows)


def hourly_grid(start_hour: int, end_hour: int):
    """One-hour windows [h:00, h+1:00) for every hour in [start_hour, end_hour)."""
    return [(h * 60, (h + 1) * 60) for h in range(start_hour, end_hour)]


def free_times(grid, busy):
    """
    Start times (HH:MM) of the grid windows that overlap none of the busy ranges.

    grid and busy are iterables of (start_minutes, end_minutes). The result is
    ordered by start time and rebuilt from scratch on every call.
    """
    busy = list(busy)
    out = []
    for start, end in sorted(grid):
        if any(overlaps(start, end, b_start, b_end) for b_start, b_end in busy):
            continue
        out.append(format_hhmm(start))
    return out
