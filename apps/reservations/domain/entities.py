"""
Reservation Domain Entities

Plain records the lifecycle engine works with:
- Reservation: a time-bounded claim on a product by a user
- ReservationState: one entry of the fixed state catalog
- UserSummary / ProductSummary: what the core knows about collaborators

The Django store maps ORM rows to these dataclasses, so the core never
depends on lazily loaded associations.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from shared.domain.base import Entity
from shared.domain.value_objects import DateRange
from apps.reservations.domain.states import StateName


@dataclass(frozen=True)
class ReservationState:
    name: str
    description: str = ''
    is_active: bool = True


@dataclass(frozen=True)
class UserSummary:
    id: int
    email: str
    display_name: str = ''


@dataclass(frozen=True)
class ProductSummary:
    id: int
    name: str
    price_per_day: Decimal


@dataclass(kw_only=True, eq=False)
class Reservation(Entity):
    """
    Reservation record

    Key invariants:
    - start_date <= end_date, both inclusive
    - total_price > 0
    - Confirmed reservations of one product never overlap

    The mark_* methods only stamp fields; legality of a transition is
    checked by the lifecycle engine before they are called.
    """

    user_id: int
    product_id: int
    start_date: date
    end_date: date
    total_price: Decimal
    state_name: str = StateName.PENDING.value
    observations: str = ''

    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def days(self) -> int:
        """Number of rented days, both ends included"""
        return len(self.dates)

    def is_in(self, state: str) -> bool:
        return self.state_name == str(state)

    def overlaps(self, start_date: date, end_date: date) -> bool:
        return self.dates.overlaps_with(DateRange(start_date, end_date))

    def mark_confirmed(self, now: datetime):
        self.state_name = StateName.CONFIRMED.value
        self.confirmed_at = now
        self.modified_at = now

    def mark_cancelled(self, now: datetime, reason: str | None = None):
        self.state_name = StateName.CANCELLED.value
        self.cancelled_at = now
        self.cancellation_reason = reason
        self.modified_at = now

    def mark_completed(self, now: datetime):
        self.state_name = StateName.COMPLETED.value
        self.modified_at = now

    def __str__(self):
        return f"Reservation {self.id} ({self.state_name}, {self.dates})"
