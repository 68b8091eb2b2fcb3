"""
Ports of the reservation core

Abstract collaborators the lifecycle engine is built against. The Django
adapters live in apps.reservations.repositories and
apps.reservations.notifications; tests use in-memory fakes.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, List
from uuid import UUID

from shared.application.uow import AbstractUnitOfWork
from apps.reservations.domain.entities import (
    ProductSummary,
    Reservation,
    ReservationState,
    UserSummary,
)


class UserDirectory(ABC):

    @abstractmethod
    def exists(self, user_id: int) -> bool:
        pass

    @abstractmethod
    def get(self, user_id: int) -> UserSummary | None:
        pass


class ProductCatalog(ABC):

    @abstractmethod
    def exists(self, product_id: int) -> bool:
        pass

    @abstractmethod
    def get(self, product_id: int) -> ProductSummary | None:
        pass


class StateRegistry(ABC):

    @abstractmethod
    def find_by_name(self, name: str) -> ReservationState | None:
        pass

    @abstractmethod
    def list_active(self) -> List[ReservationState]:
        pass


class ReservationStore(ABC):
    """
    Persistence of reservations

    unit_of_work(*product_ids) must return a unit of work that runs in one
    transaction and excludes every other unit of work touching any of those
    products until it ends. Products are locked in ascending id order. All
    writes of the engine happen inside one.
    """

    @abstractmethod
    def unit_of_work(self, *product_ids: int) -> AbstractUnitOfWork:
        pass

    @abstractmethod
    def save(self, reservation: Reservation) -> Reservation:
        """Insert (id is None) or update a reservation and return the stored copy"""

    @abstractmethod
    def find_by_id(self, reservation_id: UUID) -> Reservation | None:
        pass

    @abstractmethod
    def find_overlapping(
        self,
        product_id: int,
        start_date: date,
        end_date: date,
        states: Iterable[str],
        exclude_id: UUID | None = None,
    ) -> List[Reservation]:
        """
        Reservations of the product in one of `states` whose inclusive range
        intersects [start_date, end_date], ordered by start date
        """

    @abstractmethod
    def find_active_by_user(self, user_id: int, today: date) -> List[Reservation]:
        """Pending or Confirmed reservations of the user not yet ended"""

    @abstractmethod
    def find_upcoming(self, within_days: int, today: date) -> List[Reservation]:
        """Confirmed reservations starting between today and today + within_days"""

    @abstractmethod
    def find_by_user(self, user_id: int) -> List[Reservation]:
        pass

    @abstractmethod
    def find_by_product(self, product_id: int) -> List[Reservation]:
        pass

    @abstractmethod
    def find_by_state(self, state_name: str) -> List[Reservation]:
        pass

    @abstractmethod
    def find_by_user_and_state(self, user_id: int, state_name: str) -> List[Reservation]:
        pass

    @abstractmethod
    def find_history(
        self,
        user_id: int,
        date_from: date,
        date_to: date,
        states: Iterable[str] | None = None,
    ) -> List[Reservation]:
        """
        Reservations of the user starting or ending inside
        [date_from, date_to], newest first
        """


class NotificationGateway(ABC):
    """
    Outbound notifications

    Implementations may raise; the engine and the reminder scheduler log
    and absorb every failure.
    """

    @abstractmethod
    def notify_confirmed(self, reservation: Reservation):
        pass

    @abstractmethod
    def notify_state_changed(self, reservation: Reservation, previous_state_name: str):
        pass

    @abstractmethod
    def notify_reminder(self, reservation: Reservation, days_remaining: int):
        pass
