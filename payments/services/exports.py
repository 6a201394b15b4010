from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from django.utils import timezone
from openpyxl import Workbook

from sastreria.errors import store_errors

from ..models import Payment

HEADERS = ["Fecha", "Pedido", "Cliente", "Concepto", "Método", "Monto", "Notas"]


def _export_value(value):
    if isinstance(value, datetime):
        return timezone.localtime(value).replace(tzinfo=None) if timezone.is_aware(value) else value
    if value is None:
        return ""
    return value


def build_payments_workbook(start: date, end: date) -> Workbook:
    """Payments received between ``start`` and ``end`` (inclusive) as a single sheet."""
    with store_errors("Error al exportar pagos"):
        payments = list(
            Payment.objects.between(start, end).select_related("order__client").order_by("paid_at", "pk")
        )

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Pagos"
    sheet.append(["Periodo", f"{start.isoformat()} a {end.isoformat()}"])
    sheet.append([])
    sheet.append(HEADERS)
    for payment in payments:
        sheet.append(
            [
                _export_value(payment.paid_at),
                payment.order_id,
                payment.order.client.name,
                payment.get_concept_display(),
                payment.get_method_display(),
                payment.amount,
                _export_value(payment.notes),
            ]
        )
    total = sum((payment.amount for payment in payments), Decimal("0.00"))
    sheet.append([])
    sheet.append(["TOTAL", "", "", "", "", total, ""])
    return workbook
