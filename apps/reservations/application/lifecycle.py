"""
Reservation Lifecycle Engine

Creates reservations and moves them through their states:

    create    -> Pending (or an explicitly requested state)
    confirm   Pending -> Confirmed
    cancel    Pending | Confirmed -> Cancelled
    complete  Confirmed -> Completed (only once the end date has passed)

Every write runs inside the store's unit of work for the reservation's
product (both products when an update moves it), so two writers of one
product never interleave. Inside that lock the reservation is reloaded and
availability is checked again before a reservation becomes Confirmed.

Notifications are registered on the unit of work and only sent after the
transaction has committed. A failing notification is logged and never
changes the outcome of the operation.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable
from uuid import UUID
import logging

from apps.reservations.application.availability import AvailabilityChecker
from apps.reservations.application.ports import (
    NotificationGateway,
    ProductCatalog,
    ReservationStore,
    StateRegistry,
    UserDirectory,
)
from apps.reservations.domain.entities import Reservation
from apps.reservations.domain.results import Failure, FailureKind, Result, catch_unexpected
from apps.reservations.domain.states import StateName, can_transition, is_terminal

logger = logging.getLogger(__name__)

# A reservation can move to another product between the unlocked read and
# the locked reload; the lock is then retaken on the new product.
MAX_LOCK_ATTEMPTS = 3

# Matches Reservation.total_price (max_digits=12, decimal_places=2)
PRICE_QUANTUM = Decimal("0.01")
MAX_PRICE = Decimal("9999999999.99")


@dataclass
class CreateReservationCommand:
    user_id: int | None
    product_id: int | None
    start_date: date | None
    end_date: date | None
    total_price: Decimal | None
    observations: str = ''
    state_name: str | None = None
    reservation_id: UUID | None = None


@dataclass(frozen=True)
class Eligibility:
    allowed: bool
    message: str


def validate_dates(start_date: date | None, end_date: date | None, today: date) -> Failure | None:
    """Date preconditions shared by create and can_user_reserve"""
    if start_date is None or end_date is None:
        return Failure(FailureKind.VALIDATION_ERROR, "Start and end dates are required")
    if start_date > end_date:
        return Failure(FailureKind.VALIDATION_ERROR, "Start date cannot be after the end date")
    if start_date < today:
        return Failure(FailureKind.VALIDATION_ERROR, "Start date cannot be in the past")
    return None


def parse_price(value) -> Decimal | None:
    """
    Price as stored (two decimal places), or None when it is not an amount

    Non-finite values, values with more than two decimal places and values
    that do not fit the price column are rejected rather than rounded.
    """
    if value is None:
        return None
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        return None
    if not price.is_finite() or abs(price) > MAX_PRICE:
        return None
    if price != price.quantize(PRICE_QUANTUM):
        return None
    return price.quantize(PRICE_QUANTUM)


class ReservationLifecycleEngine:
    """
    Guarded operations on reservations

    Collaborators are injected so the engine runs the same against the
    Django adapters and the in-memory fakes used in tests. `today` and
    `now` are clocks (callables) for the same reason.
    """

    def __init__(
        self,
        store: ReservationStore,
        users: UserDirectory,
        products: ProductCatalog,
        states: StateRegistry,
        notifier: NotificationGateway,
        checker: AvailabilityChecker | None = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.users = users
        self.products = products
        self.states = states
        self.notifier = notifier
        self.checker = checker or AvailabilityChecker(store)
        self.today = today
        self.now = now

    # ==================== Create / update ====================

    @catch_unexpected("saving the reservation")
    def create(self, command: CreateReservationCommand) -> Result[Reservation]:
        failure = self._validate_command(command)
        if failure:
            logger.info(f"Reservation rejected: {failure.message}")
            return Result.from_failure(failure)

        state_name = str(command.state_name or StateName.PENDING)
        state = self.states.find_by_name(state_name)
        if state is None:
            return Result.fail(FailureKind.NOT_FOUND, f"State '{state_name}' does not exist")

        if command.reservation_id is None:
            return self._create_new(command, state.name)
        return self._update_existing(command, state.name)

    def _validate_command(self, command: CreateReservationCommand) -> Failure | None:
        failure = validate_dates(command.start_date, command.end_date, self.today())
        if failure:
            return failure

        price = parse_price(command.total_price)
        if price is None or price <= 0:
            return Failure(FailureKind.VALIDATION_ERROR, "Total price must be a positive amount with at most two decimal places")

        if command.user_id is None:
            return Failure(FailureKind.VALIDATION_ERROR, "A user is required")
        if command.product_id is None:
            return Failure(FailureKind.VALIDATION_ERROR, "A product is required")

        if not self.users.exists(command.user_id):
            return Failure(FailureKind.NOT_FOUND, f"User {command.user_id} does not exist")
        if not self.products.exists(command.product_id):
            return Failure(FailureKind.NOT_FOUND, f"Product {command.product_id} does not exist")
        return None

    def _create_new(self, command: CreateReservationCommand, state_name: str) -> Result[Reservation]:
        with self.store.unit_of_work(command.product_id) as uow:
            report = self.checker.is_available(
                command.product_id, command.start_date, command.end_date
            )
            if not report.available:
                return Result.fail(FailureKind.UNAVAILABLE, report.describe())

            now = self.now()
            reservation = Reservation(
                user_id=command.user_id,
                product_id=command.product_id,
                start_date=command.start_date,
                end_date=command.end_date,
                total_price=parse_price(command.total_price),
                observations=command.observations or '',
                state_name=state_name,
                created_at=now,
                modified_at=now,
            )
            if reservation.is_in(StateName.CONFIRMED):
                reservation.confirmed_at = now

            saved = self.store.save(reservation)

            if saved.is_in(StateName.CONFIRMED):
                uow.on_commit(self._dispatch, self.notifier.notify_confirmed, saved)

        logger.info(
            f"Reservation {saved.id} created for product {saved.product_id} "
            f"({saved.dates}, {saved.state_name})"
        )
        return Result.ok(saved)

    def _update_existing(self, command: CreateReservationCommand, state_name: str) -> Result[Reservation]:
        # Both the current and the requested product stay locked while the
        # reservation moves between them
        return self._transition(
            command.reservation_id,
            lambda current, uow: self._apply_update(current, command, state_name),
            also_lock=command.product_id,
        )

    def _apply_update(
        self, current: Reservation, command: CreateReservationCommand, state_name: str
    ) -> Result[Reservation]:
        if is_terminal(current.state_name):
            return Result.fail(
                FailureKind.INVALID_TRANSITION,
                f"A reservation in state '{current.state_name}' can no longer be modified",
            )
        if state_name != current.state_name:
            return Result.fail(
                FailureKind.INVALID_TRANSITION,
                "An update cannot change the reservation state; use confirm, cancel or complete",
            )

        report = self.checker.is_available(
            command.product_id,
            command.start_date,
            command.end_date,
            exclude_id=current.id,
        )
        if not report.available:
            return Result.fail(
                FailureKind.UNAVAILABLE,
                f"The reservation cannot be updated. {report.describe()}",
            )

        current.user_id = command.user_id
        current.product_id = command.product_id
        current.start_date = command.start_date
        current.end_date = command.end_date
        current.total_price = parse_price(command.total_price)
        current.observations = command.observations or ''
        current.modified_at = self.now()

        saved = self.store.save(current)
        logger.info(f"Reservation {saved.id} updated ({saved.dates})")
        return Result.ok(saved)

    # ==================== Transitions ====================

    @catch_unexpected("confirming the reservation")
    def confirm(self, reservation_id: UUID) -> Result[Reservation]:
        if self.states.find_by_name(StateName.CONFIRMED.value) is None:
            return Result.fail(FailureKind.NOT_FOUND, "State 'Confirmed' does not exist")
        return self._transition(reservation_id, self._apply_confirm)

    @catch_unexpected("cancelling the reservation")
    def cancel(self, reservation_id: UUID, reason: str | None = None) -> Result[Reservation]:
        if self.states.find_by_name(StateName.CANCELLED.value) is None:
            return Result.fail(FailureKind.NOT_FOUND, "State 'Cancelled' does not exist")
        return self._transition(
            reservation_id,
            lambda reservation, uow: self._apply_cancel(reservation, uow, reason),
        )

    @catch_unexpected("completing the reservation")
    def complete(self, reservation_id: UUID) -> Result[Reservation]:
        if self.states.find_by_name(StateName.COMPLETED.value) is None:
            return Result.fail(FailureKind.NOT_FOUND, "State 'Completed' does not exist")
        return self._transition(reservation_id, self._apply_complete)

    def _transition(self, reservation_id: UUID, apply, also_lock: int | None = None) -> Result[Reservation]:
        """
        Run `apply(reservation, uow)` on a copy reloaded under the product lock

        `also_lock` names a further product to lock in the same unit of work.
        """
        for _ in range(MAX_LOCK_ATTEMPTS):
            snapshot = self.store.find_by_id(reservation_id)
            if snapshot is None:
                return self._not_found(reservation_id)

            product_ids = {snapshot.product_id}
            if also_lock is not None:
                product_ids.add(also_lock)

            with self.store.unit_of_work(*product_ids) as uow:
                current = self.store.find_by_id(reservation_id)
                if current is None:
                    return self._not_found(reservation_id)
                if current.product_id not in product_ids:
                    continue
                return apply(current, uow)

        return Result.fail(
            FailureKind.PERSISTENCE_FAILURE,
            f"Reservation {reservation_id} kept changing while waiting for its lock",
        )

    def _apply_confirm(self, reservation: Reservation, uow) -> Result[Reservation]:
        if not can_transition(reservation.state_name, StateName.CONFIRMED):
            return Result.fail(
                FailureKind.INVALID_TRANSITION,
                f"Only pending reservations can be confirmed (current state: '{reservation.state_name}')",
            )

        report = self.checker.is_available(
            reservation.product_id,
            reservation.start_date,
            reservation.end_date,
            exclude_id=reservation.id,
        )
        if not report.available:
            logger.warning(f"Reservation {reservation.id} cannot be confirmed: dates taken")
            return Result.fail(
                FailureKind.UNAVAILABLE,
                f"The product is no longer available on those dates. {report.describe()}",
            )

        reservation.mark_confirmed(self.now())
        saved = self.store.save(reservation)
        uow.on_commit(self._dispatch, self.notifier.notify_confirmed, saved)

        logger.info(f"Reservation {saved.id} confirmed")
        return Result.ok(saved)

    def _apply_cancel(self, reservation: Reservation, uow, reason: str | None) -> Result[Reservation]:
        if not can_transition(reservation.state_name, StateName.CANCELLED):
            if reservation.is_in(StateName.CANCELLED):
                message = "The reservation is already cancelled"
            else:
                message = "A completed reservation cannot be cancelled"
            return Result.fail(FailureKind.INVALID_TRANSITION, message)

        previous = reservation.state_name
        reservation.mark_cancelled(self.now(), reason)
        saved = self.store.save(reservation)
        uow.on_commit(self._dispatch, self.notifier.notify_state_changed, saved, previous)

        logger.info(f"Reservation {saved.id} cancelled (was {previous})")
        return Result.ok(saved)

    def _apply_complete(self, reservation: Reservation, uow) -> Result[Reservation]:
        if not can_transition(reservation.state_name, StateName.COMPLETED):
            return Result.fail(
                FailureKind.INVALID_TRANSITION,
                f"Only confirmed reservations can be completed (current state: '{reservation.state_name}')",
            )
        if reservation.end_date > self.today():
            return Result.fail(
                FailureKind.TOO_EARLY,
                f"The reservation cannot be completed before its end date ({reservation.end_date})",
            )

        previous = reservation.state_name
        reservation.mark_completed(self.now())
        saved = self.store.save(reservation)
        uow.on_commit(self._dispatch, self.notifier.notify_state_changed, saved, previous)

        logger.info(f"Reservation {saved.id} completed")
        return Result.ok(saved)

    # ==================== Eligibility ====================

    @catch_unexpected("checking whether the user can reserve")
    def can_user_reserve(
        self,
        user_id: int,
        product_id: int,
        start_date: date | None,
        end_date: date | None,
    ) -> Result[Eligibility]:
        if user_id is None or not self.users.exists(user_id):
            return self._deny("The user does not exist")
        if product_id is None or not self.products.exists(product_id):
            return self._deny("The product does not exist")

        today = self.today()
        failure = validate_dates(start_date, end_date, today)
        if failure:
            return self._deny(failure.message)

        report = self.checker.is_available(product_id, start_date, end_date)
        if not report.available:
            return self._deny(report.describe())

        active = self.store.find_active_by_user(user_id, today)
        if any(r.overlaps(start_date, end_date) for r in active):
            return self._deny("The user already has an active reservation on those dates")

        return Result.ok(Eligibility(True, "The user can reserve the product on those dates"))

    # ==================== Helpers ====================

    @staticmethod
    def _deny(message: str) -> Result[Eligibility]:
        return Result.ok(Eligibility(False, message))

    @staticmethod
    def _not_found(reservation_id) -> Result[Reservation]:
        return Result.fail(FailureKind.NOT_FOUND, f"Reservation {reservation_id} does not exist")

    def _dispatch(self, send, *args):
        try:
            send(*args)
        except Exception as e:
            logger.error(f"Notification {getattr(send, '__name__', send)} failed: {e}", exc_info=True)
