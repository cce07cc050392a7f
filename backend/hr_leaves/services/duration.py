from __future__ import annotations

from typing import TYPE_CHECKING

from hr_leaves.exceptions import BadRequestError

if TYPE_CHECKING:
    from datetime import date


def validate_date_range(start: date, end: date) -> None:
    """Raise BadRequestError if the range ends before it starts."""
    if start > end:
        raise BadRequestError("start_date must be on or before end_date")


def calculate_duration_days(start: date, end: date) -> int:
    """Count the calendar days in the inclusive range ``[start, end]``.

    Weekends and holidays are counted like any other day.
    """
    validate_date_range(start, end)
    return (end - start).days + 1
