"""Notification gateway backed by Celery tasks.

Each notification is queued as a task with the reservation id; the task
loads the reservation and delivers email and in-app messages.
"""

from __future__ import annotations

from apps.reservations.application.ports import NotificationGateway
from apps.reservations.domain.entities import Reservation

from . import tasks


class CeleryNotificationGateway(NotificationGateway):

    def notify_confirmed(self, reservation: Reservation):
        tasks.notify_reservation_confirmed.delay(str(reservation.id))

    def notify_state_changed(self, reservation: Reservation, previous_state_name: str):
        tasks.notify_reservation_state_changed.delay(str(reservation.id), str(previous_state_name))

    def notify_reminder(self, reservation: Reservation, days_remaining: int):
        tasks.notify_reservation_reminder.delay(str(reservation.id), days_remaining)
