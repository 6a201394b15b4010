from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from orders.models import Order
from orders.services import OrderDeletedError, has_cent_precision
from sastreria.errors import NotFoundError, ServiceError, ValidationResult, store_errors

from ..models import Payment

logger = logging.getLogger(__name__)

OVERPAYMENT = "sobrepago"

_METHOD_KEYS = {
    Payment.Method.CASH: "cash",
    Payment.Method.CARD: "card",
    Payment.Method.TRANSFER: "transfer",
}
_CONCEPT_KEYS = {
    Payment.Concept.ADVANCE: "advances",
    Payment.Concept.INSTALLMENT: "installments",
    Payment.Concept.SETTLEMENT: "settlements",
}


class OverpaymentConfirmationRequired(ServiceError):
    default_message = "Sobrepago detectado"

    def __init__(self, warnings: list[dict[str, Any]], message: Optional[str] = None) -> None:
        super().__init__(message)
        self.warnings = warnings


@dataclass
class PaymentDraft:
    order_id: Optional[int]
    amount: Optional[Decimal]
    concept: str
    method: str
    notes: str = ""
    paid_at: Optional[datetime] = None
    confirm_overpayment: bool = False


class PaymentService:
    def __init__(self, *, actor=None) -> None:
        self.actor = actor

    def validate(self, draft: PaymentDraft, order: Optional[Order] = None) -> ValidationResult:
        """Check the payment fields and, when ``order`` is given, flag an overpayment.

        The overpayment is reported as a warning so callers can ask for an
        explicit confirmation; it never makes the result invalid.
        """
        errors = self._field_errors(draft.amount, draft.concept, draft.method)
        warnings: list[dict[str, Any]] = []

        if order is not None and draft.amount is not None and draft.amount > 0:
            paid = self.total_paid(order.pk)
            new_total = paid + draft.amount
            if new_total > order.total_cost:
                excess = new_total - order.total_cost
                warnings.append(
                    {
                        "tipo": OVERPAYMENT,
                        "mensaje": f"El cliente pagaría ${excess:.2f} de más",
                        "excedente": excess,
                        "detalles": {
                            "costo_total": order.total_cost,
                            "total_pagado": paid,
                            "nuevo_pago": draft.amount,
                            "nuevo_total": new_total,
                        },
                    }
                )
        return ValidationResult(errors=errors, warnings=warnings)

    def register(self, draft: PaymentDraft, actor=None) -> Payment:
        actor = actor or self.actor
        with store_errors("Error al registrar pago"):
            order = Order.objects.filter(pk=draft.order_id).first() if draft.order_id else None
        if order is None:
            raise NotFoundError("Pedido no encontrado")
        if order.deleted:
            raise OrderDeletedError()

        result = self.validate(draft, order)
        result.raise_if_invalid()
        overpayments = [warning for warning in result.warnings if warning["tipo"] == OVERPAYMENT]
        if overpayments and not draft.confirm_overpayment:
            raise OverpaymentConfirmationRequired(result.warnings)

        with store_errors("Error al registrar pago"):
            with transaction.atomic():
                payment = Payment.objects.create(
                    order=order,
                    amount=draft.amount,
                    concept=draft.concept,
                    method=draft.method,
                    notes=(draft.notes or "").strip(),
                    paid_at=draft.paid_at or timezone.now(),
                    registered_by=actor if getattr(actor, "is_authenticated", False) else None,
                )
        if overpayments:
            logger.warning(
                "Pago %s del pedido %s confirmado con excedente de %s",
                payment.pk,
                order.pk,
                overpayments[0]["excedente"],
            )
        else:
            logger.info("Pago %s registrado para el pedido %s por %s", payment.pk, order.pk, payment.amount)
        return payment

    def daily_summary(self, day: Optional[date] = None) -> dict[str, Any]:
        day = day or timezone.localdate()
        summary: dict[str, Any] = {key: Decimal("0.00") for key in _METHOD_KEYS.values()}
        summary.update({key: 0 for key in _CONCEPT_KEYS.values()})
        summary["date"] = day
        summary["total"] = Decimal("0.00")
        summary["transactions"] = 0

        with store_errors("Error al obtener resumen del día"):
            payments = list(Payment.objects.on_day(day).only("amount", "method", "concept"))
        for payment in payments:
            method_key = _METHOD_KEYS.get(payment.method)
            if method_key:
                summary[method_key] += payment.amount
            concept_key = _CONCEPT_KEYS.get(payment.concept)
            if concept_key:
                summary[concept_key] += 1
            summary["total"] += payment.amount
            summary["transactions"] += 1
        return summary

    def for_order(self, order_id: int) -> list[Payment]:
        with store_errors("Error al obtener pagos del pedido"):
            return list(Payment.objects.for_order(order_id).newest_first())

    def for_client(self, client_id: int) -> list[Payment]:
        with store_errors("Error al obtener pagos del cliente"):
            return list(Payment.objects.for_client(client_id).select_related("order").newest_first())

    def in_range(self, start: date, end: date) -> list[Payment]:
        with store_errors("Error al obtener pagos"):
            return list(
                Payment.objects.between(start, end).select_related("order__client", "registered_by").newest_first()
            )

    def total_paid(self, order_id: int) -> Decimal:
        with store_errors("Error al obtener total pagado"):
            total = Payment.objects.for_order(order_id).aggregate(total=Sum("amount"))["total"]
        return total or Decimal("0.00")

    def update(self, payment_id: int, data: Mapping[str, Any]) -> Payment:
        payment = self._load(payment_id)
        amount = data.get("amount", payment.amount)
        concept = data.get("concept", payment.concept)
        method = data.get("method", payment.method)
        ValidationResult(errors=self._field_errors(amount, concept, method)).raise_if_invalid()

        payment.amount = amount
        payment.concept = concept
        payment.method = method
        if "notes" in data:
            payment.notes = (data.get("notes") or "").strip()
        with store_errors("Error al actualizar pago"):
            with transaction.atomic():
                payment.save()
        logger.info("Pago %s modificado por %s", payment.pk, getattr(self.actor, "email", "sistema"))
        return payment

    def delete(self, payment_id: int) -> None:
        payment = self._load(payment_id)
        with store_errors("Error al eliminar pago"):
            with transaction.atomic():
                payment.delete()
        logger.info("Pago %s eliminado por %s", payment_id, getattr(self.actor, "email", "sistema"))

    def _field_errors(self, amount: Optional[Decimal], concept: str, method: str) -> dict[str, str]:
        errors: dict[str, str] = {}
        if amount is None or amount <= 0:
            errors["monto"] = "El monto debe ser mayor a 0"
        elif not has_cent_precision(amount):
            errors["monto"] = "El monto no puede tener más de 2 decimales"
        if not concept:
            errors["concepto"] = "El concepto es obligatorio"
        elif concept not in Payment.Concept.values:
            errors["concepto"] = "Concepto de pago inválido"
        if not method:
            errors["metodo"] = "El método de pago es obligatorio"
        elif method not in Payment.Method.values:
            errors["metodo"] = "Método de pago inválido"
        return errors

    def _load(self, payment_id: int) -> Payment:
        with store_errors("Error al obtener pago"):
            payment = Payment.objects.select_related("order").filter(pk=payment_id).first()
        if payment is None:
            raise NotFoundError("Pago no encontrado")
        return payment
