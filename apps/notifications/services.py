"""Notification services for reservation emails and in-app messages."""

from __future__ import annotations

import logging
from html import unescape
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from django.contrib.auth.models import AbstractBaseUser
    from apps.reservations.models import Reservation

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d.%m.%Y"


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    message: str = "",
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one email notification.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        message: Plain text body (derived from html_message when empty)
        html_message: HTML body (optional)

    Returns:
        bool: True if the message was handed to the email backend
    """
    if not recipient_email:
        logger.warning(f"Email '{subject}' skipped: recipient has no address")
        return False

    try:
        text_message = message
        if html_message and not text_message:
            text_message = unescape(strip_tags(html_message))

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _reservation_context(reservation: "Reservation") -> dict:
    """Reservation fields for an email body, escaped for HTML"""
    user = reservation.user
    return {
        "user_name": escape(user.get_full_name() or user.get_username() or user.email),
        "product_name": escape(reservation.product.name),
        "start_date": reservation.start_date.strftime(DATE_FORMAT),
        "end_date": reservation.end_date.strftime(DATE_FORMAT),
        "days": (reservation.end_date - reservation.start_date).days + 1,
        "total_price": reservation.total_price,
        "state": escape(reservation.state.name),
        "reservation_code": str(reservation.pk)[:8].upper(),
    }


def send_reservation_confirmation_email(reservation: "Reservation") -> bool:
    """Tell the user their reservation is confirmed."""
    context = _reservation_context(reservation)
    subject = f"Reservation {context['reservation_code']} confirmed"

    html_message = f"""
    <html>
    <body>
        <h2>Hello, {context['user_name']}!</h2>
        <p>Your reservation has been confirmed.</p>

        <h3>Reservation details:</h3>
        <ul>
            <li><strong>Code:</strong> {context['reservation_code']}</li>
            <li><strong>Product:</strong> {context['product_name']}</li>
            <li><strong>From:</strong> {context['start_date']}</li>
            <li><strong>To:</strong> {context['end_date']}</li>
            <li><strong>Days:</strong> {context['days']}</li>
            <li><strong>Total:</strong> {context['total_price']}</li>
        </ul>

        <p>We will remind you before the rental starts.</p>

        <p>Best regards,<br>The ReCore team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=reservation.user.email,
        subject=subject,
        html_message=html_message,
    )


def send_reservation_state_changed_email(reservation: "Reservation", previous_state: str) -> bool:
    """Tell the user their reservation moved to another state (cancelled, completed)."""
    context = _reservation_context(reservation)
    subject = f"Reservation {context['reservation_code']} is now {reservation.state.name}"

    reason = ""
    if reservation.cancellation_reason:
        reason = f"<p><strong>Reason:</strong> {escape(reservation.cancellation_reason)}</p>"

    html_message = f"""
    <html>
    <body>
        <h2>Hello, {context['user_name']}!</h2>
        <p>The state of your reservation of <strong>{context['product_name']}</strong>
        ({context['start_date']} - {context['end_date']}) changed
        from <strong>{escape(previous_state)}</strong> to <strong>{context['state']}</strong>.</p>
        {reason}

        <p>Best regards,<br>The ReCore team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=reservation.user.email,
        subject=subject,
        html_message=html_message,
    )


def send_reservation_reminder_email(reservation: "Reservation", days_remaining: int) -> bool:
    """Remind the user that their rental starts soon."""
    context = _reservation_context(reservation)
    when = "tomorrow" if days_remaining == 1 else f"in {days_remaining} days"
    subject = f"Reminder: your rental of {reservation.product.name} starts {when}"

    html_message = f"""
    <html>
    <body>
        <h2>Hello, {context['user_name']}!</h2>
        <p>Your rental of <strong>{context['product_name']}</strong> starts {when}.</p>

        <ul>
            <li><strong>From:</strong> {context['start_date']}</li>
            <li><strong>To:</strong> {context['end_date']}</li>
            <li><strong>Total:</strong> {context['total_price']}</li>
        </ul>

        <p>Enjoy!<br>The ReCore team</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=reservation.user.email,
        subject=subject,
        html_message=html_message,
    )


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def create_in_app_notification(user: "AbstractBaseUser", title: str, message: str) -> bool:
    """
    Store an in-app notification.

    Args:
        user: Recipient
        title: Notification title
        message: Notification text

    Returns:
        bool: True if the notification was created
    """
    try:
        from .models import Notification

        Notification.objects.create(
            user=user,
            title=title,
            message=message,
        )

        logger.info(f"In-app notification created for user {user.pk}: {title}")
        return True

    except Exception as e:
        logger.error(f"Failed to create in-app notification for user {user.pk}: {e}", exc_info=True)
        return False
