"""Wiring of the reservation core to Django.

Callers (admin actions, Celery tasks, shell) get engines from here instead
of assembling the adapters themselves.
"""

from __future__ import annotations

from typing import Iterable

from django.utils import timezone  # type: ignore

from apps.reservations.application.lifecycle import ReservationLifecycleEngine
from apps.reservations.application.queries import ReservationQueries
from apps.reservations.application.reminders import DEFAULT_LEAD_DAYS, ReminderScheduler
from apps.reservations.notifications import CeleryNotificationGateway
from apps.reservations.repositories import (
    DjangoProductCatalog,
    DjangoReservationStore,
    DjangoStateRegistry,
    DjangoUserDirectory,
)


def build_lifecycle_engine() -> ReservationLifecycleEngine:
    return ReservationLifecycleEngine(
        store=DjangoReservationStore(),
        users=DjangoUserDirectory(),
        products=DjangoProductCatalog(),
        states=DjangoStateRegistry(),
        notifier=CeleryNotificationGateway(),
        today=timezone.localdate,
        now=timezone.now,
    )


def build_reservation_queries() -> ReservationQueries:
    return ReservationQueries(
        store=DjangoReservationStore(),
        users=DjangoUserDirectory(),
        states=DjangoStateRegistry(),
        today=timezone.localdate,
    )


def build_reminder_scheduler(lead_days: Iterable[int] = DEFAULT_LEAD_DAYS) -> ReminderScheduler:
    return ReminderScheduler(
        store=DjangoReservationStore(),
        notifier=CeleryNotificationGateway(),
        lead_days=lead_days,
        today=timezone.localdate,
    )
