"""Django adapters for the reservation core ports.

ORM rows are mapped to the plain dataclasses of
apps.reservations.domain.entities on the way out and back on save.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, List
from uuid import UUID

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Q  # type: ignore

from apps.catalog.models import Product
from apps.reservations.application.ports import (
    ProductCatalog,
    ReservationStore,
    StateRegistry,
    UserDirectory,
)
from apps.reservations.domain.entities import (
    ProductSummary,
    Reservation,
    ReservationState,
    UserSummary,
)
from apps.reservations.domain.states import ACTIVE_STATES, StateName
from apps.reservations.models import Reservation as ReservationModel
from apps.reservations.models import ReservationState as ReservationStateModel
from shared.application.uow import DjangoUnitOfWork

logger = logging.getLogger(__name__)


class DjangoUserDirectory(UserDirectory):

    def exists(self, user_id: int) -> bool:
        return get_user_model().objects.filter(pk=user_id).exists()

    def get(self, user_id: int) -> UserSummary | None:
        user = get_user_model().objects.filter(pk=user_id).first()
        if user is None:
            return None
        return UserSummary(
            id=user.pk,
            email=user.email,
            display_name=user.get_full_name() or user.get_username(),
        )


class DjangoProductCatalog(ProductCatalog):

    def exists(self, product_id: int) -> bool:
        return Product.objects.filter(pk=product_id).exists()

    def get(self, product_id: int) -> ProductSummary | None:
        product = Product.objects.filter(pk=product_id).first()
        if product is None:
            return None
        return ProductSummary(id=product.pk, name=product.name, price_per_day=product.price_per_day)


class DjangoStateRegistry(StateRegistry):

    def find_by_name(self, name: str) -> ReservationState | None:
        row = ReservationStateModel.objects.filter(name=str(name)).first()
        return _state_to_entity(row) if row else None

    def list_active(self) -> List[ReservationState]:
        return [_state_to_entity(row) for row in ReservationStateModel.objects.filter(is_active=True)]


class DjangoReservationStore(ReservationStore):
    """
    Reservation persistence on the Django ORM

    unit_of_work(*product_ids) locks the product rows with
    SELECT ... FOR UPDATE in ascending id order, so writers of one product
    queue up behind each other until the surrounding transaction ends.
    """

    def __init__(self, using: str | None = None):
        self.using = using

    def unit_of_work(self, *product_ids: int) -> DjangoUnitOfWork:
        ids = sorted(set(product_ids))
        return DjangoUnitOfWork(lock=lambda: self._lock_products(ids), using=self.using)

    def _lock_products(self, product_ids: List[int]) -> None:
        # Evaluated for its side effect: the row locks live until commit
        list(
            Product.objects.using(self.using)
            .select_for_update()
            .filter(pk__in=product_ids)
            .order_by("pk")
            .values_list("pk", flat=True)
        )

    # ==================== Writes ====================

    def save(self, reservation: Reservation) -> Reservation:
        state = self._manager_for(ReservationStateModel).get(name=reservation.state_name)
        fields = {
            "user_id": reservation.user_id,
            "product_id": reservation.product_id,
            "state": state,
            "start_date": reservation.start_date,
            "end_date": reservation.end_date,
            "total_price": reservation.total_price,
            "observations": reservation.observations or "",
            "confirmed_at": reservation.confirmed_at,
            "cancelled_at": reservation.cancelled_at,
            "cancellation_reason": reservation.cancellation_reason,
            "created_at": reservation.created_at,
            "modified_at": reservation.modified_at,
        }

        if reservation.id is None:
            row = self._manager_for(ReservationModel).create(**fields)
        else:
            row = self._manager_for(ReservationModel).get(pk=reservation.id)
            for name, value in fields.items():
                setattr(row, name, value)
            row.save()

        return _to_entity(row)

    # ==================== Finders ====================

    def find_by_id(self, reservation_id: UUID) -> Reservation | None:
        row = self._queryset().filter(pk=reservation_id).first()
        return _to_entity(row) if row else None

    def find_overlapping(
        self,
        product_id: int,
        start_date: date,
        end_date: date,
        states: Iterable[str],
        exclude_id: UUID | None = None,
    ) -> List[Reservation]:
        queryset = self._queryset().filter(
            product_id=product_id,
            state__name__in=[str(s) for s in states],
            start_date__lte=end_date,
            end_date__gte=start_date,
        )
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return self._entities(queryset.order_by("start_date", "id"))

    def find_active_by_user(self, user_id: int, today: date) -> List[Reservation]:
        queryset = self._queryset().filter(
            user_id=user_id,
            state__name__in=ACTIVE_STATES,
            end_date__gte=today,
        )
        return self._entities(queryset.order_by("start_date"))

    def find_upcoming(self, within_days: int, today: date) -> List[Reservation]:
        queryset = self._queryset().filter(
            state__name=StateName.CONFIRMED.value,
            start_date__gte=today,
            start_date__lte=today + timedelta(days=within_days),
        )
        return self._entities(queryset.order_by("start_date"))

    def find_by_user(self, user_id: int) -> List[Reservation]:
        return self._entities(self._queryset().filter(user_id=user_id).order_by("-created_at"))

    def find_by_product(self, product_id: int) -> List[Reservation]:
        return self._entities(self._queryset().filter(product_id=product_id).order_by("start_date"))

    def find_by_state(self, state_name: str) -> List[Reservation]:
        return self._entities(self._queryset().filter(state__name=str(state_name)).order_by("-created_at"))

    def find_by_user_and_state(self, user_id: int, state_name: str) -> List[Reservation]:
        queryset = self._queryset().filter(user_id=user_id, state__name=str(state_name))
        return self._entities(queryset.order_by("-created_at"))

    def find_history(
        self,
        user_id: int,
        date_from: date,
        date_to: date,
        states: Iterable[str] | None = None,
    ) -> List[Reservation]:
        queryset = self._queryset().filter(user_id=user_id).filter(
            Q(start_date__range=(date_from, date_to)) | Q(end_date__range=(date_from, date_to))
        )
        if states:
            queryset = queryset.filter(state__name__in=[str(s) for s in states])
        return self._entities(queryset.order_by("-created_at"))

    # ==================== Helpers ====================

    def _manager_for(self, model):
        return model.objects.using(self.using) if self.using else model.objects

    def _queryset(self):
        return self._manager_for(ReservationModel).select_related("state")

    @staticmethod
    def _entities(queryset) -> List[Reservation]:
        return [_to_entity(row) for row in queryset]


def _state_to_entity(row: ReservationStateModel) -> ReservationState:
    return ReservationState(name=row.name, description=row.description, is_active=row.is_active)


def _to_entity(row: ReservationModel) -> Reservation:
    return Reservation(
        id=row.pk,
        user_id=row.user_id,
        product_id=row.product_id,
        start_date=row.start_date,
        end_date=row.end_date,
        total_price=row.total_price,
        state_name=row.state.name,
        observations=row.observations,
        confirmed_at=row.confirmed_at,
        cancelled_at=row.cancelled_at,
        cancellation_reason=row.cancellation_reason,
        created_at=row.created_at,
        modified_at=row.modified_at,
    )
