from __future__ import annotations

from typing import Any

from django.http import HttpRequest, JsonResponse

from sastreria.api import json_error, load_json_body
from sastreria.views import ApiView

from .models import Client
from .services import ClientService


def client_payload(client: Client) -> dict[str, Any]:
    return {
        "id": client.pk,
        "name": client.name,
        "phone": client.phone,
        "general_notes": client.general_notes,
        "historical_debt": str(client.historical_debt),
        "active": client.active,
        "registration_date": client.registration_date.isoformat(),
        "updated_at": client.updated_at.isoformat() if client.updated_at else None,
    }


class ClientListView(ApiView):
    http_method_names = ["get", "post"]
    required_permission = {"get": ("clientes", "ver"), "post": ("clientes", "crear")}

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        service = ClientService(actor=request.user)
        term = request.GET.get("q", "")
        if term.strip():
            clients = service.search(term)
        else:
            clients = service.get_all(include_inactive=request.GET.get("include_inactive") == "1")
        return JsonResponse({"results": [client_payload(client) for client in clients]})

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        client = ClientService(actor=request.user).create(payload)
        return JsonResponse({"client": client_payload(client)}, status=201)


class ClientDetailView(ApiView):
    http_method_names = ["get", "put"]
    required_permission = {"get": ("clientes", "ver"), "put": ("clientes", "editar")}

    def get(self, request: HttpRequest, client_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        client = ClientService(actor=request.user).get(client_id)
        if client is None:
            return json_error("Cliente no encontrado", status=404)
        return JsonResponse({"client": client_payload(client)})

    def put(self, request: HttpRequest, client_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        client = ClientService(actor=request.user).update(client_id, payload)
        return JsonResponse({"client": client_payload(client)})


class ClientDeactivateView(ApiView):
    http_method_names = ["post"]
    required_permission = {"post": ("clientes", "eliminar")}

    def post(self, request: HttpRequest, client_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        client = ClientService(actor=request.user).deactivate(client_id)
        return JsonResponse({"client": client_payload(client)})


class ClientReactivateView(ApiView):
    http_method_names = ["post"]
    required_permission = {"post": ("clientes", "editar")}

    def post(self, request: HttpRequest, client_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        client = ClientService(actor=request.user).reactivate(client_id)
        return JsonResponse({"client": client_payload(client)})


class ClientStatisticsView(ApiView):
    http_method_names = ["get"]
    required_permission = {"get": ("clientes", "ver")}

    def get(self, request: HttpRequest, client_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        stats = ClientService(actor=request.user).statistics(client_id)
        last_order_date = stats["last_order_date"]
        return JsonResponse(
            {
                "total_orders": stats["total_orders"],
                "pending_balance": str(stats["pending_balance"]),
                "last_order_date": last_order_date.isoformat() if last_order_date else None,
            }
        )
