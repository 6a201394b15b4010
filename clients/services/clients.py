from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, Max, Sum

from orders.models import Order
from sastreria.errors import NotFoundError, ServiceError, ValidationResult, store_errors

from ..models import PHONE_LENGTH, Client

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
_NON_DIGITS = re.compile(r"\D")


class DuplicatePhoneError(ServiceError):
    default_message = "Ya existe un cliente con este teléfono"


class HasActiveBalanceError(ServiceError):
    default_message = "No se puede desactivar un cliente con pedidos activos y saldo pendiente"


def _digits(value: Any) -> str:
    return _NON_DIGITS.sub("", str(value or ""))


class ClientService:
    """Validation, persistence and lookups for shop clients.

    ``data`` mappings accept the keys ``name``, ``phone``, ``general_notes`` and
    ``historical_debt``. Error keys use the form-field names shown to the user.
    """

    def __init__(self, *, actor=None) -> None:
        self.actor = actor

    def validate(self, data: Mapping[str, Any]) -> ValidationResult:
        errors: dict[str, str] = {}

        name = str(data.get("name") or "").strip()
        if not name:
            errors["nombre"] = "El nombre es obligatorio"
        elif len(name) < MIN_NAME_LENGTH:
            errors["nombre"] = f"El nombre debe tener al menos {MIN_NAME_LENGTH} caracteres"

        raw_phone = str(data.get("phone") or "").strip()
        if not raw_phone:
            errors["telefono"] = "El teléfono es obligatorio"
        elif len(_digits(raw_phone)) != PHONE_LENGTH:
            errors["telefono"] = f"El teléfono debe tener {PHONE_LENGTH} dígitos"

        return ValidationResult(errors=errors)

    def clean(self, data: Mapping[str, Any]) -> dict[str, Any]:
        notes = str(data.get("general_notes") or "").strip()
        return {
            "name": str(data.get("name") or "").strip(),
            "phone": _digits(data.get("phone"))[:PHONE_LENGTH],
            "general_notes": notes or None,
            "historical_debt": self._clean_debt(data.get("historical_debt")),
        }

    def create(self, data: Mapping[str, Any]) -> Client:
        self.validate(data).raise_if_invalid()
        cleaned = self.clean(data)
        with store_errors("Error al crear cliente"):
            try:
                with transaction.atomic():
                    client = Client.objects.create(**cleaned)
            except IntegrityError as exc:
                raise DuplicatePhoneError() from exc
        logger.info("Cliente %s registrado (%s)", client.pk, client.name)
        return client

    def update(self, client_id: int, data: Mapping[str, Any]) -> Client:
        self.validate(data).raise_if_invalid()
        cleaned = self.clean(data)
        client = self._load(client_id)
        for field_name, value in cleaned.items():
            setattr(client, field_name, value)
        with store_errors("Error al actualizar cliente"):
            try:
                with transaction.atomic():
                    client.save()
            except IntegrityError as exc:
                raise DuplicatePhoneError() from exc
        logger.info("Cliente %s actualizado", client.pk)
        return client

    def deactivate(self, client_id: int) -> Client:
        client = self._load(client_id)
        with store_errors("Error al desactivar cliente"):
            if Order.objects.for_client(client.pk).outstanding().exists():
                raise HasActiveBalanceError()
            if client.active:
                client.active = False
                client.save(update_fields=["active", "updated_at"])
                logger.info("Cliente %s desactivado", client.pk)
        return client

    def reactivate(self, client_id: int) -> Client:
        client = self._load(client_id)
        if not client.active:
            with store_errors("Error al reactivar cliente"):
                client.active = True
                client.save(update_fields=["active", "updated_at"])
            logger.info("Cliente %s reactivado", client.pk)
        return client

    def get_all(self, *, include_inactive: bool = False) -> list[Client]:
        with store_errors("Error al obtener clientes"):
            queryset = Client.objects.all() if include_inactive else Client.objects.active()
            return list(queryset.order_by("name"))

    def get(self, client_id: int) -> Optional[Client]:
        with store_errors("Error al obtener cliente"):
            return Client.objects.filter(pk=client_id).first()

    def search(self, term: str) -> list[Client]:
        with store_errors("Error al buscar clientes"):
            return list(Client.objects.search(term))

    def statistics(self, client_id: int) -> dict[str, Any]:
        with store_errors("Error al obtener estadísticas del cliente"):
            orders = Order.objects.for_client(client_id).not_deleted()
            aggregates = orders.aggregate(total_orders=Count("pk"), last_order_date=Max("created_at"))
            pending = orders.exclude(state=Order.State.DELIVERED).aggregate(total=Sum("pending_balance"))["total"]
            return {
                "total_orders": aggregates["total_orders"],
                "pending_balance": pending or Decimal("0.00"),
                "last_order_date": aggregates["last_order_date"],
            }

    def _load(self, client_id: int) -> Client:
        with store_errors("Error al obtener cliente"):
            client = Client.objects.filter(pk=client_id).first()
        if client is None:
            raise NotFoundError("Cliente no encontrado")
        return client

    @staticmethod
    def _clean_debt(value: Any) -> Decimal:
        if value in (None, ""):
            return Decimal("0.00")
        try:
            debt = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return Decimal("0.00")
        if not debt.is_finite() or debt < 0:
            return Decimal("0.00")
        return debt.quantize(Decimal("0.01"))
