"""
slot_utils.py
-------------
Time arithmetic used by the availability engine:

- "HH:MM" <-> minutes since midnight
- day-of-week numbering (0 = Sunday .. 6 = Saturday, as stored on schedules)
- merging working intervals and stepping candidate slots through them
- turning a local calendar date into a timezone-aware day window

Everything here is pure (no database access) so it can be unit tested on its own.
"""

import re
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from django.utils import timezone

from ..exceptions import FormatError

HHMM_RE = re.compile(r"^\d{2}:\d{2}$")
MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> int:
    """
    Convert "HH:MM" (24-hour, zero-padded) into minutes since midnight.

    Raises:
        FormatError: if the string is not exactly HH:MM or falls outside 00:00..23:59.
    """
    if not isinstance(value, str) or not HHMM_RE.match(value):
        raise FormatError(f"Invalid time {value!r}. Use HH:MM.")
    hours, minutes = int(value[:2]), int(value[3:])
    if hours > 23 or minutes > 59:
        raise FormatError(f"Invalid time {value!r}. Use a value between 00:00 and 23:59.")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Inverse of parse_time: 570 -> "09:30"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise FormatError(f"Minute offset {minutes} is outside a single day.")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(value) -> int:
    """Sunday-based day index for a date (Python's weekday() is Monday-based)."""
    return (value.weekday() + 1) % 7


def validate_day_of_week(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
        raise FormatError(f"Invalid day of week {value!r}. Use 0 (Sunday) to 6 (Saturday).")
    return value


def merge_intervals(intervals):
    """
    Merge (start, end) minute intervals into a sorted, disjoint list.

    Touching intervals are merged too: (540, 720) and (720, 780) become (540, 780),
    so no zero-length gap is left between a shift and extra hours.
    """
    merged = []
    for start, end in sorted(intervals, key=lambda iv: iv[0]):
        if merged and start <= merged[-1][1]:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def generate_slots(intervals, service_duration_minutes: int):
    """
    Candidate slot starts (minute offsets) inside merged intervals.

    Slots step by the service duration, starting at each interval start, and must
    end on or before the interval end.
    """
    if service_duration_minutes <= 0:
        raise FormatError("Service duration must be a positive number of minutes.")

    slots = []
    for start, end in intervals:
        current = start
        while current + service_duration_minutes <= end:
            slots.append(current)
            current += service_duration_minutes
    return slots


def get_zone(tz_name=None):
    """ZoneInfo for an organization's timezone, or Django's current timezone."""
    if tz_name:
        return ZoneInfo(tz_name)
    return timezone.get_current_timezone()


def date_to_range(target_date, tz=None):
    """
    Convert a date into a timezone-aware day window [start, end).
    """
    tz = tz or timezone.get_current_timezone()
    day_start = timezone.make_aware(
        datetime(target_date.year, target_date.month, target_date.day), tz
    )
    next_day = target_date + timedelta(days=1)
    day_end = timezone.make_aware(datetime(next_day.year, next_day.month, next_day.day), tz)
    return day_start, day_end


def minute_to_datetime(target_date, minutes: int, tz=None):
    """Aware datetime for `minutes` after local midnight of `target_date`."""
    tz = tz or timezone.get_current_timezone()
    naive = datetime(target_date.year, target_date.month, target_date.day) + timedelta(minutes=minutes)
    return timezone.make_aware(naive, tz)


def parse_date(value: str):
    """Strict YYYY-MM-DD parsing; also accepts an ISO datetime and keeps the date part."""
    raw = (value or "").strip()
    if "T" in raw:
        raw = raw.split("T", 1)[0]
    elif " " in raw:
        raw = raw.split(" ", 1)[0]
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise FormatError("Invalid date format. Use YYYY-MM-DD.")
