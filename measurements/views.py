from __future__ import annotations

from typing import Any

from django.http import HttpRequest, JsonResponse

from sastreria.api import json_error, load_json_body, parse_int
from sastreria.views import ApiView

from .models import Measurement
from .services import MeasurementDraft, MeasurementService


def measurement_payload(measurement: Measurement) -> dict[str, Any]:
    return {
        "id": measurement.pk,
        "client_id": measurement.client_id,
        "kind": measurement.kind,
        "kind_label": measurement.get_kind_display(),
        "values": measurement.values,
        "label": measurement.label,
        "taken_at": measurement.taken_at.isoformat(),
        "active": measurement.active,
        "has_extreme_changes": measurement.has_extreme_changes,
        "detected_changes": measurement.detected_changes,
    }


class MeasurementListView(ApiView):
    """Lookups by client (``client``) narrowed by ``kind``, ``q`` or ``history=1``."""

    http_method_names = ["get", "post"]
    required_permission = {"get": ("medidas", "ver"), "post": ("medidas", "crear")}

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        client_id = parse_int(request.GET.get("client"))
        if client_id is None:
            return json_error("El cliente es obligatorio", errors={"cliente": "El cliente es obligatorio"})
        service = MeasurementService()
        kind = request.GET.get("kind")
        if kind:
            measurement = service.latest_by_kind(client_id, kind)
            return JsonResponse({"measurement": measurement_payload(measurement) if measurement else None})
        if request.GET.get("q"):
            measurements = service.search_by_label(client_id, request.GET["q"])
        elif request.GET.get("history") == "1":
            measurements = service.history(client_id)
        else:
            measurements = service.for_client(client_id)
        return JsonResponse({"results": [measurement_payload(item) for item in measurements]})

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        client_id = parse_int(payload.get("client_id"))
        if client_id is None:
            return json_error("El cliente es obligatorio", errors={"cliente": "El cliente es obligatorio"})
        draft = MeasurementDraft(
            client_id=client_id,
            kind=str(payload.get("kind") or ""),
            values=payload.get("values"),
            label=str(payload.get("label") or ""),
        )
        measurement = MeasurementService().create(draft)
        return JsonResponse({"measurement": measurement_payload(measurement)}, status=201)


class ClientMeasurementsView(ApiView):
    http_method_names = ["get"]
    required_permission = {"get": ("medidas", "ver")}

    def get(self, request: HttpRequest, client_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        measurements = MeasurementService().for_client(client_id)
        return JsonResponse({"results": [measurement_payload(item) for item in measurements]})


class MeasurementDetailView(ApiView):
    http_method_names = ["get", "delete"]
    required_permission = {"get": ("medidas", "ver"), "delete": ("medidas", "eliminar")}

    def get(self, request: HttpRequest, measurement_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        measurement = MeasurementService().get(measurement_id)
        if measurement is None:
            return json_error("Medida no encontrada", status=404)
        return JsonResponse({"measurement": measurement_payload(measurement)})

    def delete(self, request: HttpRequest, measurement_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        MeasurementService().delete(measurement_id)
        return JsonResponse({"status": "deleted"})


class MeasurementVersionView(ApiView):
    http_method_names = ["post"]
    required_permission = {"post": ("medidas", "editar")}

    def post(self, request: HttpRequest, measurement_id: int, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        measurement = MeasurementService().create_new_version(measurement_id, payload.get("values"))
        return JsonResponse({"measurement": measurement_payload(measurement)}, status=201)
