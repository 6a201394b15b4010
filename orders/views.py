from __future__ import annotations

from typing import Any

from django.http import HttpRequest, JsonResponse

from sastreria.api import json_error, load_json_body, parse_date, parse_decimal, parse_int
from sastreria.views import ApiView

from .models import Order
from .services import OrderDraft, OrderItemDraft, OrderService


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def order_payload(order: Order, *, detailed: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": order.pk,
        "client": {"id": order.client_id, "name": order.client.name, "phone": order.client.phone},
        "service_type": order.service_type,
        "state": order.state,
        "group_name": order.group_name,
        "group_id": str(order.group_id) if order.group_id else None,
        "description": order.description,
        "total_cost": str(order.total_cost),
        "pending_balance": str(order.pending_balance),
        "promised_date": _iso(order.promised_date),
        "last_contact_at": _iso(order.last_contact_at),
        "created_at": _iso(order.created_at),
        "deleted": order.deleted,
    }
    if detailed:
        payload["items"] = [
            {
                "id": item.pk,
                "garment_type": item.garment_type,
                "description": item.description,
                "measurement_id": item.measurement_id,
                "measurement_values": item.measurement.values if item.measurement else None,
                "event_date": _iso(item.event_date),
                "return_date": _iso(item.return_date),
            }
            for item in order.items.all()
        ]
        payload["payments"] = [
            {
                "id": payment.pk,
                "amount": str(payment.amount),
                "concept": payment.concept,
                "method": payment.method,
                "paid_at": _iso(payment.paid_at),
            }
            for payment in order.payments.all()
        ]
        if order.deleted:
            payload["deletion_reason"] = order.deletion_reason
            payload["deletion_date"] = _iso(order.deletion_date)
    return payload


def draft_from_payload(payload: dict[str, Any]) -> OrderDraft:
    items = [
        OrderItemDraft(
            garment_type=str(item.get("garment_type") or ""),
            description=str(item.get("description") or ""),
            measurement_id=parse_int(item.get("measurement_id")),
        )
        for item in payload.get("items") or []
        if isinstance(item, dict)
    ]
    return OrderDraft(
        client_id=parse_int(payload.get("client_id")),
        service_type=str(payload.get("service_type") or ""),
        total_cost=parse_decimal(payload.get("total_cost")),
        down_payment=parse_decimal(payload.get("down_payment")),
        promised_date=parse_date(payload.get("promised_date")),
        items=items,
        description=str(payload.get("description") or ""),
        group_name=str(payload.get("group_name") or ""),
        event_date=parse_date(payload.get("event_date")),
        return_date=parse_date(payload.get("return_date")),
        payment_method=str(payload.get("payment_method") or "Efectivo"),
    )


class OrderListView(ApiView):
    http_method_names = ["get", "post"]
    required_permission = {"get": ("pedidos", "ver"), "post": ("pedidos", "crear")}

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        service = OrderService(actor=request.user)
        params = request.GET
        if params.get("q"):
            orders = service.search(params["q"])
        elif params.get("state"):
            orders = service.by_state(params["state"])
        elif params.get("group"):
            orders = service.by_group(params["group"])
        elif parse_int(params.get("client")) is not None:
            orders = service.for_client(parse_int(params["client"]))
        else:
            orders = service.get_all(include_deleted=params.get("include_deleted") == "1")
        return JsonResponse({"results": [order_payload(order) for order in orders]})

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        order = OrderService(actor=request.user).create(draft_from_payload(payload))
        return JsonResponse({"order": order_payload(order, detailed=True)}, status=201)


class OrderDetailView(ApiView):
    http_method_names = ["get", "put", "delete"]
    required_permission = {
        "get": ("pedidos", "ver"),
        "put": ("pedidos", "editar"),
        "delete": ("pedidos", "eliminar"),
    }

    def get(self, request: HttpRequest, order_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        order = OrderService(actor=request.user).get(order_id)
        if order is None:
            return json_error("Pedido no encontrado", status=404)
        return JsonResponse({"order": order_payload(order, detailed=True)})

    def put(self, request: HttpRequest, order_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        changes: dict[str, Any] = {}
        if "group_name" in payload:
            changes["group_name"] = str(payload.get("group_name") or "")
        if "description" in payload:
            changes["description"] = str(payload.get("description") or "")
        if "promised_date" in payload:
            changes["promised_date"] = parse_date(payload.get("promised_date"))
        if "total_cost" in payload:
            changes["total_cost"] = parse_decimal(payload.get("total_cost"))
        order = OrderService(actor=request.user).update(order_id, changes)
        return JsonResponse({"order": order_payload(order, detailed=True)})

    def delete(self, request: HttpRequest, order_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        order = OrderService(actor=request.user).delete(order_id, str(payload.get("reason") or ""), request.user)
        return JsonResponse({"order": order_payload(order)})


class OrderStateView(ApiView):
    http_method_names = ["post"]
    required_permission = {"post": ("pedidos", "editar")}

    def post(self, request: HttpRequest, order_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        order = OrderService(actor=request.user).change_state(order_id, str(payload.get("state") or ""))
        return JsonResponse({"order": order_payload(order)})


class OrderAdvanceView(ApiView):
    http_method_names = ["post"]
    required_permission = {"post": ("pedidos", "editar")}

    def post(self, request: HttpRequest, order_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        order = OrderService(actor=request.user).advance(order_id)
        return JsonResponse({"order": order_payload(order) if order else None})


class OrderAbandonView(ApiView):
    http_method_names = ["post"]
    required_permission = {"post": ("pedidos", "editar")}

    def post(self, request: HttpRequest, order_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        order = OrderService(actor=request.user).abandon(order_id)
        return JsonResponse({"order": order_payload(order)})


class OrderStatisticsView(ApiView):
    http_method_names = ["get"]
    required_permission = {"get": ("pedidos", "ver")}

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        stats = OrderService(actor=request.user).statistics()
        stats["total_balance"] = str(stats["total_balance"])
        return JsonResponse(stats)
