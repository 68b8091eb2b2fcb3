import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("recore")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Reminders for reservations starting in RESERVATION_REMINDER_DAYS days
    "send-upcoming-reservation-reminders": {
        "task": "reservations.send_upcoming_reservation_reminders",
        "schedule": crontab(hour=9, minute=0),  # every day at 09:00
    },
}
