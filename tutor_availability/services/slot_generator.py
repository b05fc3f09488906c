from datetime import datetime, time
from typing import Any, List
import re

from tutor_availability.core.exceptions import MalformedRecordError


_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?\s*$")


def parse_time_of_day(value: Any) -> time:
    """Coerce a stored time-of-day (time, datetime or "HH:MM[:SS]") to minute precision"""
    if isinstance(value, datetime):
        return time(value.hour, value.minute)

    if isinstance(value, time):
        return time(value.hour, value.minute)

    if isinstance(value, str):
        match = _TIME_PATTERN.match(value)
        if match:
            try:
                return time(int(match.group(1)), int(match.group(2)))
            except ValueError:
                pass

    raise MalformedRecordError(f"Unparsable time of day: {value!r}")


def format_time_of_day(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def generate_slots(start_time: Any, end_time: Any, increment_minutes: int = 30) -> List[str]:
    """
    Generate slot start times covering [start_time, end_time).

    Emits the current time, then advances by `increment_minutes`, for as long
    as the current time is strictly before `end_time`. The final slot is not
    checked against the range end, so a range that is not a whole number of
    increments (09:00-09:45 by 30) yields a last slot whose nominal end
    overruns `end_time`. A range with start >= end yields no slots.
    """
    if increment_minutes <= 0:
        raise ValueError("increment_minutes must be positive")

    start = parse_time_of_day(start_time)
    end = parse_time_of_day(end_time)

    slots = []
    hour, minute = start.hour, start.minute
    while (hour, minute) < (end.hour, end.minute):
        slots.append(f"{hour:02d}:{minute:02d}")
        minute += increment_minutes
        hour += minute // 60
        minute %= 60

    return slots
