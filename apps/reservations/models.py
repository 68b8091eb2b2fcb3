"""Reservation models for ReCore.

The ORM rows behind apps.reservations.domain. State changes go through
the lifecycle engine (apps.reservations.services); the admin only shows
the state and calls the engine from its actions.
"""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ReservationState(models.Model):
    """One entry of the fixed state catalog (Pending, Confirmed, ...)."""

    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("Reservation state")
        verbose_name_plural = _("Reservation states")
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class Reservation(models.Model):
    """A time-bounded claim on a product by a user, dates inclusive."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reservations",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    state = models.ForeignKey(
        ReservationState,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    observations = models.TextField(blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField()
    modified_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F("end_date")),
                name="reservation_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gt=0),
                name="reservation_positive_price",
            ),
        ]
        indexes = [
            models.Index(fields=["product", "start_date", "end_date"], name="reservation_product_dates_idx"),
            models.Index(fields=["user", "end_date"], name="reservation_user_end_idx"),
            models.Index(fields=["state", "start_date"], name="reservation_state_start_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.id} for product {self.product_id}"
