"""
Common Value Objects

- DateRange: an inclusive range of calendar dates (first day to last day)
"""

from dataclasses import dataclass
from datetime import date

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date to end_date, both inclusive.
    A single-day range has start_date == end_date.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date is None or self.end_date is None:
            raise ValueError("Both start and end dates are required")
        if self.start_date > self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must not be after end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Both ends are inclusive, so ranges sharing a boundary day overlap.

        Examples:
            - DateRange(10, 15) overlaps with DateRange(14, 20) -> True
            - DateRange(10, 15) overlaps with DateRange(15, 20) -> True (shared day)
            - DateRange(10, 15) overlaps with DateRange(16, 20) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        # Overlap formula: start1 <= end2 AND end1 >= start2
        return (self.start_date <= other.end_date and
                self.end_date >= other.start_date)

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def __len__(self) -> int:
        """Number of calendar days covered, counting both ends."""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
