from __future__ import annotations

import json
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.dateparse import parse_date as django_parse_date

from .errors import ServiceError, ServiceValidationError


def json_error(
    message: str,
    *,
    status: int = 400,
    errors: Optional[dict[str, Any]] = None,
    **extra: Any,
) -> JsonResponse:
    payload: dict[str, Any] = {"error": message}
    if errors:
        payload["errors"] = errors
    payload.update(extra)
    return JsonResponse(payload, status=status)


def load_json_body(request: HttpRequest) -> tuple[Optional[dict[str, Any]], Optional[JsonResponse]]:
    try:
        payload = json.loads(request.body or "{}")
    except json.JSONDecodeError:
        return None, json_error("JSON inválido")
    if not isinstance(payload, dict):
        return None, json_error("El cuerpo debe ser un objeto JSON")
    return payload, None


def service_error_response(exc: ServiceError) -> JsonResponse:
    if isinstance(exc, ServiceValidationError):
        return json_error(exc.message, status=exc.status_code, errors=exc.field_errors)
    warnings = getattr(exc, "warnings", None)
    if warnings:
        return json_error(exc.message, status=exc.status_code, warnings=warnings)
    return json_error(exc.message, status=exc.status_code)


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return django_parse_date(str(value)[:10])
    except ValueError:
        return None


def parse_decimal(value: Any) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
