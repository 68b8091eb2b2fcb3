"""Concurrent writers on the reservations of one product."""

from __future__ import annotations

import threading
import unittest
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TransactionTestCase

from apps.catalog.models import Category, Product
from apps.reservations.application.lifecycle import CreateReservationCommand, ReservationLifecycleEngine
from apps.reservations.domain.results import FailureKind
from apps.reservations.domain.states import StateName
from apps.reservations.models import Reservation as ReservationModel

from .fakes import (
    OTHER_PRODUCT,
    OTHER_USER,
    PRODUCT,
    USER,
    FakeProductCatalog,
    FakeStateRegistry,
    FakeUserDirectory,
    InMemoryReservationStore,
    command,
)


def _confirm_all(engine, reservation_ids):
    barrier = threading.Barrier(len(reservation_ids))
    results = {}

    def worker(reservation_id):
        barrier.wait()
        results[reservation_id] = engine.confirm(reservation_id)

    threads = [threading.Thread(target=worker, args=(rid,)) for rid in reservation_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


def test_sequential_confirms_of_overlapping_reservations(engine):
    first = engine.create(command(date(2025, 7, 1), date(2025, 7, 5))).value
    second = engine.create(command(date(2025, 7, 5), date(2025, 7, 9), user_id=OTHER_USER)).value

    assert engine.confirm(first.id).is_success
    assert engine.confirm(second.id).kind == FailureKind.UNAVAILABLE


@pytest.mark.parametrize("attempt", range(5))
def test_concurrent_confirms_never_both_succeed(engine, store, attempt):
    first = engine.create(command(date(2025, 7, 1), date(2025, 7, 5))).value
    second = engine.create(command(date(2025, 7, 3), date(2025, 7, 8), user_id=OTHER_USER)).value

    results = _confirm_all(engine, [first.id, second.id])

    outcomes = sorted(result.is_success for result in results.values())
    assert outcomes == [False, True]
    loser = next(result for result in results.values() if not result.is_success)
    assert loser.kind == FailureKind.UNAVAILABLE
    confirmed = store.find_by_state(StateName.CONFIRMED.value)
    assert len(confirmed) == 1


class PausingReservationStore(InMemoryReservationStore):
    """Holds the next save until `resume` is set, with its locks still taken."""

    def __init__(self):
        super().__init__()
        self.pause_next_save = False
        self.paused = threading.Event()
        self.resume = threading.Event()

    def save(self, reservation):
        if self.pause_next_save:
            self.pause_next_save = False
            self.paused.set()
            self.resume.wait(timeout=5)
        return super().save(reservation)


def test_confirm_waits_for_an_update_moving_the_reservation(notifier, clock):
    store = PausingReservationStore()
    engine = ReservationLifecycleEngine(
        store=store,
        users=FakeUserDirectory(USER, OTHER_USER),
        products=FakeProductCatalog(PRODUCT, OTHER_PRODUCT),
        states=FakeStateRegistry(),
        notifier=notifier,
        today=clock.today,
        now=clock.now,
    )
    created = engine.create(command(date(2025, 7, 1), date(2025, 7, 5), product_id=OTHER_PRODUCT)).value
    results = {}

    store.pause_next_save = True
    mover = threading.Thread(target=lambda: results.setdefault("update", engine.create(
        command(date(2025, 7, 1), date(2025, 7, 5), reservation_id=created.id)
    )))
    confirmer = threading.Thread(target=lambda: results.setdefault("confirm", engine.confirm(created.id)))

    mover.start()
    assert store.paused.wait(timeout=5)
    confirmer.start()
    confirmer.join(timeout=0.2)
    blocked = confirmer.is_alive()
    store.resume.set()
    mover.join(timeout=5)
    confirmer.join(timeout=5)

    assert blocked
    assert results["update"].is_success, results["update"].message
    assert results["confirm"].is_success, results["confirm"].message
    final = store.find_by_id(created.id)
    assert final.product_id == PRODUCT
    assert final.state_name == StateName.CONFIRMED.value


class ConcurrentConfirmationDatabaseTests(TransactionTestCase):
    """Same race against the Django store and a real database connection per thread."""

    serialized_rollback = True

    def setUp(self) -> None:
        from apps.reservations.services import build_lifecycle_engine

        self.engine = build_lifecycle_engine()
        user_model = get_user_model()
        self.alice = user_model.objects.create_user(username="alice", email="alice@example.com", password="x")
        self.bob = user_model.objects.create_user(username="bob", email="bob@example.com", password="x")
        category = Category.objects.create(slug="tools", name="Tools")
        self.product = Product.objects.create(category=category, name="Drill", price_per_day=Decimal("5.00"))

    def _pending(self, user, start, end):
        result = self.engine.create(CreateReservationCommand(
            user_id=user.pk,
            product_id=self.product.pk,
            start_date=start,
            end_date=end,
            total_price=Decimal("25.00"),
        ))
        self.assertTrue(result.is_success, result.message)
        return result.value

    @unittest.skipUnless(connection.vendor == "sqlite", "SQLite only")
    def test_sqlite_writers_take_the_lock_up_front(self) -> None:
        self.assertEqual(connection.settings_dict["OPTIONS"]["transaction_mode"], "IMMEDIATE")

    def test_only_one_confirmation_wins(self) -> None:
        start = date.today() + timedelta(days=10)
        first = self._pending(self.alice, start, start + timedelta(days=4))
        second = self._pending(self.bob, start + timedelta(days=2), start + timedelta(days=6))

        def worker(reservation_id, results):
            try:
                results[reservation_id] = self.engine.confirm(reservation_id)
            finally:
                connection.close()

        results = {}
        barrier = threading.Barrier(2)
        threads = [
            threading.Thread(target=lambda rid=rid: (barrier.wait(), worker(rid, results)))
            for rid in (first.id, second.id)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        self.assertEqual(sorted(r.is_success for r in results.values()), [False, True])
        loser = next(r for r in results.values() if not r.is_success)
        self.assertEqual(loser.kind, FailureKind.UNAVAILABLE, loser.message)
        self.assertEqual(
            ReservationModel.objects.filter(
                product=self.product, state__name=StateName.CONFIRMED.value
            ).count(),
            1,
        )
