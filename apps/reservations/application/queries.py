"""
Read paths over reservations

Thin pass-through to the store with the existence checks callers rely on.
"""

from datetime import date, timedelta
from typing import Callable, Iterable, List
from uuid import UUID

from apps.reservations.application.ports import ReservationStore, StateRegistry, UserDirectory
from apps.reservations.domain.entities import Reservation
from apps.reservations.domain.results import FailureKind, Result, catch_unexpected

# Default half-width of the history window
HISTORY_WINDOW = timedelta(days=365)


class ReservationQueries:

    def __init__(
        self,
        store: ReservationStore,
        users: UserDirectory,
        states: StateRegistry,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.users = users
        self.states = states
        self.today = today

    @catch_unexpected("loading the reservation")
    def get(self, reservation_id: UUID) -> Result[Reservation]:
        reservation = self.store.find_by_id(reservation_id)
        if reservation is None:
            return Result.fail(FailureKind.NOT_FOUND, f"Reservation {reservation_id} does not exist")
        return Result.ok(reservation)

    @catch_unexpected("listing reservations of the user")
    def by_user(self, user_id: int) -> Result[List[Reservation]]:
        return Result.ok(self.store.find_by_user(user_id))

    @catch_unexpected("listing reservations of the product")
    def by_product(self, product_id: int) -> Result[List[Reservation]]:
        return Result.ok(self.store.find_by_product(product_id))

    @catch_unexpected("listing reservations by state")
    def by_state(self, state_name: str) -> Result[List[Reservation]]:
        if self.states.find_by_name(state_name) is None:
            return Result.fail(FailureKind.NOT_FOUND, f"State '{state_name}' does not exist")
        return Result.ok(self.store.find_by_state(state_name))

    @catch_unexpected("listing reservations of the user by state")
    def by_user_and_state(self, user_id: int, state_name: str) -> Result[List[Reservation]]:
        if not self.users.exists(user_id):
            return Result.fail(FailureKind.NOT_FOUND, f"User {user_id} does not exist")
        if self.states.find_by_name(state_name) is None:
            return Result.fail(FailureKind.NOT_FOUND, f"State '{state_name}' does not exist")
        return Result.ok(self.store.find_by_user_and_state(user_id, state_name))

    @catch_unexpected("loading the reservation history")
    def history(
        self,
        user_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
        states: Iterable[str] | None = None,
    ) -> Result[List[Reservation]]:
        """
        Reservations of a user that start or end inside the window

        The window defaults to one year either side of today. An empty or
        missing `states` means every state.
        """
        if not self.users.exists(user_id):
            return Result.fail(FailureKind.NOT_FOUND, f"User {user_id} does not exist")

        today = self.today()
        date_from = date_from or today - HISTORY_WINDOW
        date_to = date_to or today + HISTORY_WINDOW
        if date_from > date_to:
            return Result.fail(FailureKind.VALIDATION_ERROR, "The start of the window cannot be after its end")

        state_names = [str(s) for s in states] if states else None
        return Result.ok(self.store.find_history(user_id, date_from, date_to, state_names))
