from __future__ import annotations

from datetime import date

import pytest

from apps.reservations.application.lifecycle import ReservationLifecycleEngine

from .fakes import (
    OTHER_PRODUCT,
    OTHER_USER,
    PRODUCT,
    USER,
    Clock,
    FakeProductCatalog,
    FakeStateRegistry,
    FakeUserDirectory,
    InMemoryReservationStore,
    RecordingNotifier,
)


@pytest.fixture
def clock() -> Clock:
    return Clock(date(2025, 6, 1))


@pytest.fixture
def store() -> InMemoryReservationStore:
    return InMemoryReservationStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def engine(store, notifier, clock) -> ReservationLifecycleEngine:
    return ReservationLifecycleEngine(
        store=store,
        users=FakeUserDirectory(USER, OTHER_USER),
        products=FakeProductCatalog(PRODUCT, OTHER_PRODUCT),
        states=FakeStateRegistry(),
        notifier=notifier,
        today=clock.today,
        now=clock.now,
    )
