"""Tests for the calendar-day duration calculator."""

from __future__ import annotations

from datetime import date

import pytest

from hr_leaves.exceptions import BadRequestError
from hr_leaves.services.duration import calculate_duration_days, validate_date_range


def test_single_day() -> None:
    assert calculate_duration_days(date(2025, 3, 3), date(2025, 3, 3)) == 1


def test_range_is_inclusive() -> None:
    assert calculate_duration_days(date(2025, 3, 3), date(2025, 3, 7)) == 5


def test_weekends_count() -> None:
    # Fri to Mon
    assert calculate_duration_days(date(2025, 3, 7), date(2025, 3, 10)) == 4


def test_spans_month_and_leap_day() -> None:
    assert calculate_duration_days(date(2024, 2, 28), date(2024, 3, 1)) == 3


def test_reversed_range_rejected() -> None:
    with pytest.raises(BadRequestError) as exc_info:
        calculate_duration_days(date(2025, 3, 7), date(2025, 3, 6))
    assert exc_info.value.status_code == 400


def test_validate_date_range_accepts_equal_dates() -> None:
    validate_date_range(date(2025, 1, 1), date(2025, 1, 1))
