"""Admin actions go through the lifecycle engine."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.catalog.models import Category, Product
from apps.reservations.domain.states import StateName
from apps.reservations.models import Reservation, ReservationState


class ReservationAdminActionTests(TestCase):

    def setUp(self) -> None:
        user_model = get_user_model()
        self.admin = user_model.objects.create_superuser(
            username="admin", email="admin@example.com", password="AdminPass123"
        )
        self.renter = user_model.objects.create_user(
            username="renter", email="renter@example.com", password="RenterPass123"
        )
        category = Category.objects.create(slug="boats", name="Boats")
        self.product = Product.objects.create(category=category, name="Kayak", price_per_day=Decimal("20.00"))
        self.client.force_login(self.admin)
        self.url = reverse("admin:reservations_reservation_changelist")
        self.today = timezone.localdate()

    def _reservation(self, state: str, start: int, end: int) -> Reservation:
        now = timezone.now()
        return Reservation.objects.create(
            user=self.renter,
            product=self.product,
            state=ReservationState.objects.get(name=state),
            start_date=self.today + timedelta(days=start),
            end_date=self.today + timedelta(days=end),
            total_price=Decimal("40.00"),
            created_at=now,
            modified_at=now,
        )

    def _post_action(self, action: str, *reservations: Reservation):
        return self.client.post(
            self.url,
            {"action": action, "_selected_action": [str(r.pk) for r in reservations]},
            follow=True,
        )

    def test_confirm_action(self) -> None:
        reservation = self._reservation(StateName.PENDING.value, 2, 3)

        with self.captureOnCommitCallbacks(execute=True):
            response = self._post_action("confirm_reservations", reservation)

        self.assertEqual(response.status_code, 200)
        reservation.refresh_from_db()
        self.assertEqual(reservation.state.name, StateName.CONFIRMED.value)

    def test_confirm_action_reports_conflicts(self) -> None:
        self._reservation(StateName.CONFIRMED.value, 2, 5)
        pending = self._reservation(StateName.PENDING.value, 4, 6)

        response = self._post_action("confirm_reservations", pending)

        pending.refresh_from_db()
        self.assertEqual(pending.state.name, StateName.PENDING.value)
        self.assertContains(response, "no longer available")

    def test_cancel_action_records_reason(self) -> None:
        reservation = self._reservation(StateName.CONFIRMED.value, 2, 3)

        with self.captureOnCommitCallbacks(execute=True):
            self._post_action("cancel_reservations", reservation)

        reservation.refresh_from_db()
        self.assertEqual(reservation.state.name, StateName.CANCELLED.value)
        self.assertIn("admin", reservation.cancellation_reason)

    def test_add_view_is_disabled(self) -> None:
        response = self.client.get(reverse("admin:reservations_reservation_add"))

        self.assertEqual(response.status_code, 403)
