"""Inclusive date ranges."""

from __future__ import annotations

from datetime import date

import pytest

from shared.domain.value_objects import DateRange


def test_length_counts_both_ends():
    assert len(DateRange(date(2025, 7, 1), date(2025, 7, 5))) == 5
    assert len(DateRange(date(2025, 7, 1), date(2025, 7, 1))) == 1


@pytest.mark.parametrize(
    "other, expected",
    [
        (DateRange(date(2025, 6, 14), date(2025, 6, 20)), True),
        (DateRange(date(2025, 6, 15), date(2025, 6, 20)), True),
        (DateRange(date(2025, 6, 16), date(2025, 6, 20)), False),
        (DateRange(date(2025, 6, 1), date(2025, 6, 9)), False),
        (DateRange(date(2025, 6, 11), date(2025, 6, 12)), True),
    ],
)
def test_overlap_is_inclusive(other, expected):
    booked = DateRange(date(2025, 6, 10), date(2025, 6, 15))

    assert booked.overlaps_with(other) is expected
    assert other.overlaps_with(booked) is expected


def test_invalid_ranges():
    with pytest.raises(ValueError):
        DateRange(date(2025, 7, 5), date(2025, 7, 1))
    with pytest.raises(ValueError):
        DateRange(None, date(2025, 7, 1))


def test_contains_and_str():
    dates = DateRange(date(2025, 7, 1), date(2025, 7, 3))

    assert dates.contains(date(2025, 7, 3))
    assert not dates.contains(date(2025, 7, 4))
    assert str(dates) == "2025-07-01 to 2025-07-03"
    assert dates == DateRange(date(2025, 7, 1), date(2025, 7, 3))
