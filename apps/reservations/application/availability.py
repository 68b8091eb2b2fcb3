"""
Availability Checker

Answers whether a product can be booked for an inclusive date range: the
product is available iff no Confirmed reservation of it intersects the
range. Pending reservations never block other bookings.

The checker is a pure range query. Date preconditions (both dates given,
start <= end, start not in the past) are enforced by its callers.
"""

from datetime import date
from typing import NamedTuple, Sequence
from uuid import UUID
import logging

from apps.reservations.application.ports import ReservationStore
from apps.reservations.domain.entities import Reservation
from apps.reservations.domain.states import BLOCKING_STATES

logger = logging.getLogger(__name__)

# How many conflicting ranges are spelled out in the summary message
SUMMARY_LIMIT = 3


class AvailabilityReport(NamedTuple):
    available: bool
    conflicts: tuple = ()

    def describe(self) -> str:
        if self.available:
            return "Product available for the selected dates"
        return summarize_conflicts(self.conflicts)


def summarize_conflicts(conflicts: Sequence[Reservation], limit: int = SUMMARY_LIMIT) -> str:
    """
    Human readable summary of conflicting reservations

    Example:
        Product unavailable: 4 confirmed reservation(s) on those dates.
        Booked dates: 2025-06-10 to 2025-06-15, 2025-06-20 to 2025-06-21,
        2025-07-01 to 2025-07-03 and 1 more
    """
    shown = ", ".join(str(r.dates) for r in conflicts[:limit])
    message = (
        f"Product unavailable: {len(conflicts)} confirmed reservation(s) on those dates. "
        f"Booked dates: {shown}"
    )
    if len(conflicts) > limit:
        message += f" and {len(conflicts) - limit} more"
    return message


class AvailabilityChecker:

    def __init__(self, store: ReservationStore):
        self.store = store

    def is_available(
        self,
        product_id: int,
        start_date: date,
        end_date: date,
        exclude_id: UUID | None = None,
    ) -> AvailabilityReport:
        conflicts = self.store.find_overlapping(
            product_id,
            start_date,
            end_date,
            BLOCKING_STATES,
            exclude_id=exclude_id,
        )

        if conflicts:
            logger.info(
                f"Product {product_id} unavailable for {start_date} - {end_date}: "
                f"{len(conflicts)} confirmed conflict(s)"
            )
            return AvailabilityReport(False, tuple(conflicts))

        return AvailabilityReport(True, ())
