"""Admin registration for reservations.

The state is read-only here. Confirm, cancel and complete are admin
actions that go through the lifecycle engine, so the overlap check and
notifications apply exactly as for any other caller. New reservations are
created through the engine, not through the admin form.
"""

from __future__ import annotations

from django.contrib import admin, messages
from django.utils import timezone  # type: ignore

from .models import Reservation, ReservationState
from .services import build_lifecycle_engine


@admin.register(ReservationState)
class ReservationStateAdmin(admin.ModelAdmin):
    list_display = ("name", "description", "is_active")
    readonly_fields = ("name",)

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "product",
        "user",
        "state",
        "start_date",
        "end_date",
        "total_price",
        "created_at",
    )
    list_filter = ("state", "start_date", "end_date")
    search_fields = ("id", "product__name", "user__email", "user__username")
    list_select_related = ("product", "user", "state")
    readonly_fields = (
        "id",
        "user",
        "product",
        "state",
        "start_date",
        "end_date",
        "total_price",
        "confirmed_at",
        "cancelled_at",
        "cancellation_reason",
        "created_at",
        "modified_at",
    )
    actions = ("confirm_reservations", "cancel_reservations", "complete_reservations")

    def has_add_permission(self, request):  # type: ignore
        return False

    def save_model(self, request, obj, form, change):  # type: ignore
        # Only observations are editable here
        obj.modified_at = timezone.now()
        super().save_model(request, obj, form, change)

    def _run_transition(self, request, queryset, operation: str, verb: str, **kwargs) -> None:
        engine = build_lifecycle_engine()
        done = 0
        for reservation_id in queryset.values_list("pk", flat=True):
            result = getattr(engine, operation)(reservation_id, **kwargs)
            if result.is_success:
                done += 1
            else:
                self.message_user(request, f"{reservation_id}: {result.message}", level=messages.WARNING)
        if done:
            self.message_user(request, f"{done} reservation(s) {verb}.", level=messages.SUCCESS)

    @admin.action(description="Confirm selected reservations")
    def confirm_reservations(self, request, queryset):  # type: ignore
        self._run_transition(request, queryset, "confirm", "confirmed")

    @admin.action(description="Cancel selected reservations")
    def cancel_reservations(self, request, queryset):  # type: ignore
        reason = f"Cancelled by {request.user.get_username()} from the admin"
        self._run_transition(request, queryset, "cancel", "cancelled", reason=reason)

    @admin.action(description="Complete selected reservations")
    def complete_reservations(self, request, queryset):  # type: ignore
        self._run_transition(request, queryset, "complete", "completed")
