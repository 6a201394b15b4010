from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from clients.models import Client
from measurements.models import Measurement
from payments.models import Payment
from sastreria.errors import (
    NotFoundError,
    ServiceError,
    ServiceValidationError,
    ValidationResult,
    store_errors,
)

from ..models import Order, OrderItem

logger = logging.getLogger(__name__)

FORWARD_FLOW: tuple[str, ...] = (
    Order.State.WAITING,
    Order.State.IN_PROGRESS,
    Order.State.FITTING,
    Order.State.FINISHED,
    Order.State.DELIVERED,
)

INITIAL_PAYMENT_NOTE = "Pago inicial al crear el pedido"
EDITABLE_FIELDS = ("group_name", "description", "promised_date", "total_cost")


def has_cent_precision(value: Decimal) -> bool:
    """True when ``value`` fits a money column (at most two decimals)."""
    return value.is_finite() and value.normalize().as_tuple().exponent >= -2


class OrderAlreadyDeliveredError(ServiceError):
    default_message = "No se puede editar un pedido ya entregado"


class CannotDeliverWithBalanceError(ServiceError):
    default_message = "No se puede entregar el pedido con saldo pendiente"


class OrderDeletedError(ServiceError):
    default_message = "El pedido fue eliminado y ya no puede modificarse"


@dataclass
class OrderItemDraft:
    garment_type: str = ""
    description: str = ""
    measurement_id: Optional[int] = None


@dataclass
class OrderDraft:
    client_id: Optional[int]
    service_type: str
    total_cost: Optional[Decimal]
    down_payment: Optional[Decimal]
    promised_date: Optional[date]
    items: list[OrderItemDraft] = field(default_factory=list)
    description: str = ""
    group_name: str = ""
    event_date: Optional[date] = None
    return_date: Optional[date] = None
    payment_method: str = Payment.Method.CASH


class OrderService:
    """Order lifecycle: creation with its down payment, state flow and soft deletion.

    States advance along ``FORWARD_FLOW``. ``Abandonado`` sits outside the flow
    and is only reached through :meth:`abandon`. Delivery requires the order to
    be fully paid.
    """

    def __init__(self, *, actor=None) -> None:
        self.actor = actor

    @staticmethod
    def next_state(order_or_state: Union[Order, str]) -> Optional[str]:
        state = order_or_state.state if isinstance(order_or_state, Order) else order_or_state
        if state not in FORWARD_FLOW:
            return None
        position = FORWARD_FLOW.index(state)
        if position + 1 >= len(FORWARD_FLOW):
            return None
        return FORWARD_FLOW[position + 1]

    def validate(self, draft: OrderDraft) -> ValidationResult:
        errors: dict[str, str] = {}

        if not draft.client_id:
            errors["cliente"] = "El cliente es obligatorio"

        if not draft.service_type:
            errors["tipo_servicio"] = "El tipo de servicio es obligatorio"
        elif draft.service_type not in Order.ServiceType.values:
            errors["tipo_servicio"] = "Tipo de servicio inválido"

        cost_is_valid = draft.total_cost is not None and draft.total_cost > 0
        if not cost_is_valid:
            errors["costo_total"] = "El costo total debe ser mayor a 0"
        elif not has_cent_precision(draft.total_cost):
            errors["costo_total"] = "El costo total no puede tener más de 2 decimales"
            cost_is_valid = False

        if draft.down_payment is None or draft.down_payment <= 0:
            errors["anticipo"] = "El anticipo es obligatorio y debe ser mayor a 0"
        elif not has_cent_precision(draft.down_payment):
            errors["anticipo"] = "El anticipo no puede tener más de 2 decimales"
        elif cost_is_valid and draft.down_payment > draft.total_cost:
            errors["anticipo"] = "El anticipo no puede ser mayor al costo total"

        if draft.promised_date is None:
            errors["fecha_promesa"] = "La fecha de entrega es obligatoria"
        elif draft.promised_date < timezone.localdate():
            errors["fecha_promesa"] = "La fecha de entrega no puede ser en el pasado"

        if draft.payment_method not in Payment.Method.values:
            errors["metodo"] = "Método de pago inválido"

        if draft.service_type == Order.ServiceType.CONFECCION:
            if not draft.items:
                errors["detalles"] = "Debe especificar al menos una prenda"
            for index, item in enumerate(draft.items):
                if not item.measurement_id:
                    errors[f"detalle_{index}"] = "Cada prenda debe tener medidas asociadas"

        if draft.service_type == Order.ServiceType.REMIENDO and not (draft.description or "").strip():
            errors["descripcion"] = "Debe especificar las instrucciones del remiendo"

        if draft.service_type == Order.ServiceType.RENTA:
            if draft.event_date is None:
                errors["fecha_evento"] = "La fecha del evento es obligatoria"
            if draft.return_date is None:
                errors["fecha_devolucion"] = "La fecha de devolución es obligatoria"
            if draft.event_date and draft.return_date and draft.return_date <= draft.event_date:
                errors["fecha_devolucion"] = "La devolución debe ser posterior al evento"

        return ValidationResult(errors=errors)

    def create(self, draft: OrderDraft, actor=None) -> Order:
        self.validate(draft).raise_if_invalid()
        actor = actor or self.actor
        self._ensure_references(draft)

        group_name = (draft.group_name or "").strip()
        with store_errors("Error al crear pedido"):
            with transaction.atomic():
                order = Order.objects.create(
                    client_id=draft.client_id,
                    service_type=draft.service_type,
                    state=Order.State.WAITING,
                    group_name=group_name,
                    group_id=uuid.uuid4() if group_name else None,
                    description=(draft.description or "").strip(),
                    total_cost=draft.total_cost,
                    pending_balance=draft.total_cost - draft.down_payment,
                    promised_date=draft.promised_date,
                )
                OrderItem.objects.bulk_create(self._build_items(order, draft))
                Payment.objects.create(
                    order=order,
                    amount=draft.down_payment,
                    concept=Payment.Concept.ADVANCE,
                    method=draft.payment_method or Payment.Method.CASH,
                    notes=INITIAL_PAYMENT_NOTE,
                    registered_by=actor if getattr(actor, "is_authenticated", False) else None,
                )
        logger.info(
            "Pedido %s creado para el cliente %s (%s, costo %s, anticipo %s)",
            order.pk,
            draft.client_id,
            draft.service_type,
            draft.total_cost,
            draft.down_payment,
        )
        return self._load(order.pk)

    def change_state(self, order_id: int, new_state: str) -> Order:
        order = self._load(order_id)
        self._ensure_not_deleted(order)
        if new_state == Order.State.ABANDONED:
            raise ServiceValidationError(
                field_errors={"estado": "Para abandonar un pedido usa la acción de abandono"},
            )
        if new_state not in FORWARD_FLOW:
            raise ServiceValidationError(field_errors={"estado": "Estado inválido"})
        if order.is_delivered and new_state != Order.State.DELIVERED:
            raise OrderAlreadyDeliveredError("El pedido ya fue entregado")
        if new_state == Order.State.DELIVERED and order.pending_balance > 0:
            raise CannotDeliverWithBalanceError(
                f"No se puede entregar el pedido. Saldo pendiente: ${order.pending_balance:.2f}"
            )
        return self._set_state(order, new_state)

    def advance(self, order_id: int) -> Optional[Order]:
        order = self._load(order_id)
        target = self.next_state(order)
        if target is None:
            return None
        return self.change_state(order_id, target)

    def abandon(self, order_id: int) -> Order:
        order = self._load(order_id)
        self._ensure_not_deleted(order)
        if order.is_delivered:
            raise OrderAlreadyDeliveredError("No se puede abandonar un pedido ya entregado")
        return self._set_state(order, Order.State.ABANDONED)

    def update(self, order_id: int, data: Mapping[str, Any]) -> Order:
        order = self._load(order_id)
        self._ensure_not_deleted(order)
        if order.is_delivered:
            raise OrderAlreadyDeliveredError()

        changes = {key: data[key] for key in EDITABLE_FIELDS if key in data}
        errors: dict[str, str] = {}
        if "total_cost" in changes:
            if changes["total_cost"] is None or changes["total_cost"] <= 0:
                errors["costo_total"] = "El costo total debe ser mayor a 0"
            elif not has_cent_precision(changes["total_cost"]):
                errors["costo_total"] = "El costo total no puede tener más de 2 decimales"
        if "promised_date" in changes:
            if changes["promised_date"] is None:
                errors["fecha_promesa"] = "La fecha de entrega es obligatoria"
            elif changes["promised_date"] < timezone.localdate():
                errors["fecha_promesa"] = "La fecha de entrega no puede ser en el pasado"
        ValidationResult(errors=errors).raise_if_invalid()

        if "group_name" in changes:
            group_name = (changes["group_name"] or "").strip()
            changes["group_name"] = group_name
            if not group_name:
                order.group_id = None
            elif group_name != order.group_name or order.group_id is None:
                order.group_id = uuid.uuid4()
        if "description" in changes:
            changes["description"] = (changes["description"] or "").strip()

        for field_name, value in changes.items():
            setattr(order, field_name, value)
        with store_errors("Error al actualizar pedido"):
            with transaction.atomic():
                order.save()
                if "total_cost" in changes:
                    order.refresh_pending_balance()
        logger.info("Pedido %s actualizado (%s)", order.pk, ", ".join(sorted(changes)) or "sin cambios")
        return self._load(order.pk)

    def delete(self, order_id: int, reason: str = "", actor=None) -> Order:
        order = self._load(order_id)
        self._ensure_not_deleted(order)
        if order.is_delivered:
            raise OrderAlreadyDeliveredError("No se pueden eliminar pedidos ya entregados")
        actor = actor or self.actor
        order.deleted = True
        order.deletion_reason = (reason or "").strip()
        order.deleted_by = actor if getattr(actor, "is_authenticated", False) else None
        order.deletion_date = timezone.now()
        with store_errors("Error al eliminar pedido"):
            order.save(update_fields=["deleted", "deletion_reason", "deleted_by", "deletion_date", "updated_at"])
        logger.info("Pedido %s eliminado: %s", order.pk, order.deletion_reason or "sin motivo")
        return order

    def search(self, term: str) -> list[Order]:
        with store_errors("Error al buscar pedidos"):
            return list(Order.objects.select_related("client").search(term))

    def get(self, order_id: int) -> Optional[Order]:
        with store_errors("Error al obtener pedido"):
            return Order.objects.with_details().filter(pk=order_id).first()

    def get_all(self, *, include_deleted: bool = False) -> list[Order]:
        queryset = Order.objects.all() if include_deleted else Order.objects.not_deleted()
        with store_errors("Error al obtener pedidos"):
            return list(queryset.with_details().order_by("-created_at", "-pk"))

    def for_client(self, client_id: int) -> list[Order]:
        with store_errors("Error al obtener pedidos del cliente"):
            return list(Order.objects.not_deleted().for_client(client_id).with_details())

    def by_state(self, state: str) -> list[Order]:
        with store_errors("Error al obtener pedidos por estado"):
            return list(
                Order.objects.not_deleted().filter(state=state).with_details().order_by("promised_date", "pk")
            )

    def by_group(self, group_name: str) -> list[Order]:
        with store_errors("Error al obtener pedidos del grupo"):
            return list(Order.objects.not_deleted().filter(group_name=group_name).with_details())

    def statistics(self) -> dict[str, Any]:
        today = timezone.localdate()
        with store_errors("Error al obtener estadísticas de pedidos"):
            with_balance = Order.objects.outstanding().aggregate(count=Count("pk"), total=Sum("pending_balance"))
            return {
                "total_active": Order.objects.open().count(),
                "with_balance": with_balance["count"],
                "total_balance": with_balance["total"] or Decimal("0.00"),
                "overdue": Order.objects.overdue(today).count(),
            }

    def _set_state(self, order: Order, new_state: str) -> Order:
        previous = order.state
        order.state = new_state
        order.last_contact_at = timezone.now()
        with store_errors("Error al cambiar estado del pedido"):
            order.save(update_fields=["state", "last_contact_at", "updated_at"])
        logger.info("Pedido %s: %s -> %s", order.pk, previous, new_state)
        return order

    def _ensure_references(self, draft: OrderDraft) -> None:
        with store_errors("Error al crear pedido"):
            if not Client.objects.filter(pk=draft.client_id).exists():
                raise NotFoundError("Cliente no encontrado")
            measurement_ids = {item.measurement_id for item in draft.items if item.measurement_id}
            known = set(Measurement.objects.filter(pk__in=measurement_ids).values_list("pk", flat=True))
        errors = {
            f"detalle_{index}": "La medida seleccionada no existe"
            for index, item in enumerate(draft.items)
            if item.measurement_id and item.measurement_id not in known
        }
        ValidationResult(errors=errors).raise_if_invalid()

    def _build_items(self, order: Order, draft: OrderDraft) -> list[OrderItem]:
        items = list(draft.items)
        if not items and draft.service_type in (Order.ServiceType.REMIENDO, Order.ServiceType.RENTA):
            items = [
                OrderItemDraft(
                    garment_type=Order.ServiceType(draft.service_type).label,
                    description=(draft.description or "").strip(),
                )
            ]
        is_rental = draft.service_type == Order.ServiceType.RENTA
        return [
            OrderItem(
                order=order,
                measurement_id=item.measurement_id if draft.service_type == Order.ServiceType.CONFECCION else None,
                garment_type=(item.garment_type or "").strip() or "Prenda",
                description=(item.description or "").strip(),
                event_date=draft.event_date if is_rental else None,
                return_date=draft.return_date if is_rental else None,
            )
            for item in items
        ]

    def _ensure_not_deleted(self, order: Order) -> None:
        if order.deleted:
            raise OrderDeletedError()

    def _load(self, order_id: int) -> Order:
        order = self.get(order_id)
        if order is None:
            raise NotFoundError("Pedido no encontrado")
        return order
