"""
Upcoming reservation reminders

Run once a day (see the Celery beat schedule). For every lead time N it
reminds users whose Confirmed reservation starts exactly N days from today,
so each reservation gets one reminder per lead time.
"""

from datetime import date, timedelta
from typing import Callable, Dict, Iterable
import logging

from apps.reservations.application.ports import NotificationGateway, ReservationStore

logger = logging.getLogger(__name__)

DEFAULT_LEAD_DAYS = (3, 1)


class ReminderScheduler:

    def __init__(
        self,
        store: ReservationStore,
        notifier: NotificationGateway,
        lead_days: Iterable[int] = DEFAULT_LEAD_DAYS,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.notifier = notifier
        self.lead_days = tuple(lead_days)
        self.today = today

    def run(self) -> Dict[str, int]:
        today = self.today()
        sent = failed = 0

        for days in self.lead_days:
            target = today + timedelta(days=days)
            try:
                found = self.store.find_upcoming(days, today)
            except Exception as e:
                logger.error(f"Looking up reservations starting in {days} day(s) failed: {e}", exc_info=True)
                continue

            upcoming = [r for r in found if r.start_date == target]
            for reservation in upcoming:
                try:
                    self.notifier.notify_reminder(reservation, days)
                    sent += 1
                except Exception as e:
                    failed += 1
                    logger.error(f"Reminder for reservation {reservation.id} failed: {e}", exc_info=True)

        logger.info(f"Reservation reminders: {sent} sent, {failed} failed")
        return {"sent": sent, "failed": failed}
