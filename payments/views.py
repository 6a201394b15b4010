from __future__ import annotations

from io import BytesIO
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils import timezone

from sastreria.api import json_error, load_json_body, parse_date, parse_decimal, parse_int
from sastreria.views import ApiView

from .models import Payment
from .services import PaymentDraft, PaymentService, build_payments_workbook


def payment_payload(payment: Payment) -> dict[str, Any]:
    return {
        "id": payment.pk,
        "order_id": payment.order_id,
        "amount": str(payment.amount),
        "concept": payment.concept,
        "method": payment.method,
        "notes": payment.notes,
        "paid_at": payment.paid_at.isoformat(),
        "registered_by": payment.registered_by_id,
    }


def _resolve_range(request: HttpRequest):
    today = timezone.localdate()
    start = parse_date(request.GET.get("start")) or today.replace(day=1)
    end = parse_date(request.GET.get("end")) or today
    return start, end


class PaymentListView(ApiView):
    http_method_names = ["get", "post"]
    required_permission = {"get": ("pagos", "ver"), "post": ("pagos", "registrar")}

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        service = PaymentService(actor=request.user)
        order_id = parse_int(request.GET.get("order"))
        client_id = parse_int(request.GET.get("client"))
        if order_id is not None:
            payments = service.for_order(order_id)
        elif client_id is not None:
            payments = service.for_client(client_id)
        else:
            payments = service.in_range(*_resolve_range(request))
        return JsonResponse({"results": [payment_payload(payment) for payment in payments]})

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        draft = PaymentDraft(
            order_id=parse_int(payload.get("order_id")),
            amount=parse_decimal(payload.get("amount")),
            concept=str(payload.get("concept") or ""),
            method=str(payload.get("method") or ""),
            notes=str(payload.get("notes") or ""),
            confirm_overpayment=bool(payload.get("confirm_overpayment")),
        )
        payment = PaymentService(actor=request.user).register(draft)
        return JsonResponse({"payment": payment_payload(payment)}, status=201)


class PaymentDetailView(ApiView):
    http_method_names = ["put", "delete"]
    required_permission = {"put": ("pagos", "editar"), "delete": ("pagos", "eliminar")}

    def put(self, request: HttpRequest, payment_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        changes: dict[str, Any] = {}
        if "amount" in payload:
            changes["amount"] = parse_decimal(payload.get("amount"))
        for key in ("concept", "method", "notes"):
            if key in payload:
                changes[key] = str(payload.get(key) or "")
        payment = PaymentService(actor=request.user).update(payment_id, changes)
        return JsonResponse({"payment": payment_payload(payment)})

    def delete(self, request: HttpRequest, payment_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        PaymentService(actor=request.user).delete(payment_id)
        return JsonResponse({"status": "deleted"})


class DailySummaryView(ApiView):
    http_method_names = ["get"]
    required_permission = {"get": ("pagos", "ver")}

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        raw_day = request.GET.get("date")
        day = parse_date(raw_day)
        if raw_day and day is None:
            return json_error("Fecha inválida", errors={"fecha": "Usa el formato AAAA-MM-DD"})
        summary = PaymentService(actor=request.user).daily_summary(day)
        return JsonResponse(summary)


class PaymentExportView(ApiView):
    http_method_names = ["get"]
    required_permission = {"get": ("pagos", "ver")}

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        start, end = _resolve_range(request)
        if end < start:
            return json_error("Rango de fechas inválido", errors={"fecha": "La fecha final debe ser posterior a la inicial"})
        workbook = build_payments_workbook(start, end)
        buffer = BytesIO()
        workbook.save(buffer)
        buffer.seek(0)
        response = HttpResponse(
            buffer.getvalue(),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        response["Content-Disposition"] = f'attachment; filename="pagos_{start:%Y%m%d}_{end:%Y%m%d}.xlsx"'
        return response
