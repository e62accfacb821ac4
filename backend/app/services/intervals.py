"""Interval overlap predicates.

Time-of-day ranges are half-open: a booking ending at 09:30 and another
starting at 09:30 do not overlap. Calendar date ranges are closed: a semester
ending on 2024-12-15 overlaps one starting on 2024-12-15.
"""

from __future__ import annotations

import re
from datetime import date

from app.core.exceptions import ValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValidationError(
            "Time must be in HH:MM 24-hour format",
            details={"value": value},
        )
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def time_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end


def date_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return (
        (a_start <= b_start and a_end >= b_start)
        or (a_start <= b_end and a_end >= b_end)
        or (a_start >= b_start and a_end <= b_end)
    )


def validate_slot_times(start_time: str, end_time: str, *, min_minutes: int, max_minutes: int) -> tuple[int, int]:
    """Return (start, end) in minutes, or raise ValidationError."""
    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)
    if start >= end:
        raise ValidationError(
            "Start time must be before end time",
            details={"start_time": start_time, "end_time": end_time},
        )
    duration = end - start
    if duration < min_minutes:
        raise ValidationError(
            f"Schedule duration must be at least {min_minutes} minutes",
            details={"duration_minutes": duration},
        )
    if duration > max_minutes:
        raise ValidationError(
            f"Schedule duration cannot exceed {max_minutes} minutes",
            details={"duration_minutes": duration},
        )
    return start, end
