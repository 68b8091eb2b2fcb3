"""Celery tasks for the reservation domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore

from .models import Reservation

logger = logging.getLogger(__name__)


def _load(reservation_id: str) -> Reservation | None:
    try:
        return Reservation.objects.select_related("user", "product", "state").get(pk=reservation_id)
    except Reservation.DoesNotExist:
        return None


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="reservations.send_upcoming_reservation_reminders")
def send_upcoming_reservation_reminders() -> dict[str, int]:
    """
    Remind users of confirmed reservations starting soon.

    Lead times come from settings.RESERVATION_REMINDER_DAYS (3 and 1 day
    by default). Runs every day at 09:00.

    Returns:
        dict: {"sent": reminders queued, "failed": reminders that failed}
    """
    from .services import build_reminder_scheduler

    scheduler = build_reminder_scheduler(lead_days=settings.RESERVATION_REMINDER_DAYS)
    return scheduler.run()


# ============================================================================
# NOTIFICATION TASKS
# ============================================================================

@shared_task(name="reservations.notify_reservation_confirmed")
def notify_reservation_confirmed(reservation_id: str) -> bool:
    """Confirmation email and in-app message for the user."""
    reservation = _load(reservation_id)
    if reservation is None:
        logger.error(f"Reservation {reservation_id} not found for confirmation notification")
        return False

    from apps.notifications.services import create_in_app_notification, send_reservation_confirmation_email

    sent = send_reservation_confirmation_email(reservation)
    create_in_app_notification(
        user=reservation.user,
        title="Reservation confirmed",
        message=(
            f"Your reservation of {reservation.product.name} from "
            f"{reservation.start_date:%d.%m.%Y} to {reservation.end_date:%d.%m.%Y} is confirmed."
        ),
    )

    logger.info(f"[NOTIFICATION] Reservation confirmed notification sent: {reservation.pk}")
    return sent


@shared_task(name="reservations.notify_reservation_state_changed")
def notify_reservation_state_changed(reservation_id: str, previous_state: str) -> bool:
    """State change email and in-app message (cancelled, completed)."""
    reservation = _load(reservation_id)
    if reservation is None:
        logger.error(f"Reservation {reservation_id} not found for state change notification")
        return False

    from apps.notifications.services import create_in_app_notification, send_reservation_state_changed_email

    sent = send_reservation_state_changed_email(reservation, previous_state)
    create_in_app_notification(
        user=reservation.user,
        title=f"Reservation {reservation.state.name.lower()}",
        message=(
            f"Your reservation of {reservation.product.name} changed from "
            f"{previous_state} to {reservation.state.name}."
        ),
    )

    logger.info(
        f"[NOTIFICATION] Reservation {reservation.pk} state change sent: "
        f"{previous_state} -> {reservation.state.name}"
    )
    return sent


@shared_task(name="reservations.notify_reservation_reminder")
def notify_reservation_reminder(reservation_id: str, days_remaining: int) -> bool:
    """Reminder before the rental starts."""
    reservation = _load(reservation_id)
    if reservation is None:
        logger.error(f"Reservation {reservation_id} not found for reminder notification")
        return False

    from apps.notifications.services import create_in_app_notification, send_reservation_reminder_email

    sent = send_reservation_reminder_email(reservation, days_remaining)
    create_in_app_notification(
        user=reservation.user,
        title="Upcoming rental",
        message=f"Your rental of {reservation.product.name} starts in {days_remaining} day(s).",
    )

    logger.info(f"[NOTIFICATION] Reminder sent for reservation {reservation.pk} ({days_remaining} days ahead)")
    return sent
