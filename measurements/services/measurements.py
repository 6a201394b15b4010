from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from clients.models import Client
from sastreria.errors import NotFoundError, ValidationResult, store_errors

from ..constants import MAX_VALUE, MEASUREMENT_FIELDS, tolerance_for
from ..models import Measurement

logger = logging.getLogger(__name__)

_TWO_DECIMALS = re.compile(r"^\d+(\.\d{1,2})?$")
UPDATED_LABEL_SUFFIX = " (Actualizada)"


@dataclass
class MeasurementDraft:
    client_id: int
    kind: str
    values: Mapping[str, Any]
    label: str = ""
    taken_at: Optional[datetime] = None


@dataclass
class MeasurementComparison:
    extreme_changes: list[dict[str, Any]] = field(default_factory=list)
    differences: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def has_extreme_changes(self) -> bool:
        return bool(self.extreme_changes)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


class MeasurementService:
    """Validation, comparison and versioning of client measurements.

    A client keeps at most one active measurement per kind. Saving a new one
    retires the previous record instead of overwriting it, so the history of a
    client stays available through :meth:`history`.
    """

    def validate(self, values: Any, kind: str) -> ValidationResult:
        if not isinstance(values, Mapping) or not values:
            return ValidationResult(errors={"general": "Los valores de medidas son obligatorios"})

        errors: dict[str, str] = {}
        allowed_fields = MEASUREMENT_FIELDS.get(kind)
        if allowed_fields is None:
            errors["tipo"] = "Tipo de medida inválido"

        for field_name, raw_value in values.items():
            if allowed_fields is not None and field_name not in allowed_fields:
                errors[field_name] = f"Campo no válido para medidas de {kind}"
                continue
            number = _to_decimal(raw_value)
            if number is None or number <= 0:
                errors[field_name] = "Debe ser un número positivo"
            elif number > MAX_VALUE:
                errors[field_name] = "Valor demasiado grande (máximo 300 cm)"
            elif not _TWO_DECIMALS.match(str(raw_value).strip()):
                errors[field_name] = "Máximo 2 decimales permitidos"
        return ValidationResult(errors=errors)

    def compare(
        self,
        new_values: Mapping[str, Any],
        old_values: Optional[Mapping[str, Any]],
    ) -> MeasurementComparison:
        comparison = MeasurementComparison()
        if not old_values:
            return comparison

        for field_name, raw_new in new_values.items():
            if field_name not in old_values:
                continue
            new_value = _to_decimal(raw_new)
            old_value = _to_decimal(old_values[field_name])
            if new_value is None or old_value is None:
                continue
            difference = abs(new_value - old_value)
            comparison.differences[field_name] = {
                "anterior": float(old_value),
                "nuevo": float(new_value),
                "diferencia": float(difference),
                "aumento": new_value > old_value,
            }
            tolerance = tolerance_for(field_name)
            if difference > tolerance:
                percentage = round(float(difference / old_value * 100), 1) if old_value else None
                comparison.extreme_changes.append(
                    {
                        "campo": field_name,
                        "valor_anterior": float(old_value),
                        "valor_nuevo": float(new_value),
                        "diferencia": float(difference),
                        "tolerancia": float(tolerance),
                        "porcentaje": percentage,
                    }
                )
        return comparison

    def create(self, draft: MeasurementDraft) -> Measurement:
        self.validate(draft.values, draft.kind).raise_if_invalid()
        with store_errors("Error al crear medida"):
            if not Client.objects.filter(pk=draft.client_id).exists():
                raise NotFoundError("Cliente no encontrado")

        previous = self._previous_active(draft.client_id, draft.kind)
        comparison = self.compare(draft.values, previous.values if previous else None)
        return self._persist(draft, comparison)

    def create_new_version(self, measurement_id: int, new_values: Mapping[str, Any]) -> Measurement:
        previous = self._load(measurement_id)
        draft = MeasurementDraft(
            client_id=previous.client_id,
            kind=previous.kind,
            values=new_values,
            label=f"{previous.label or 'Medida'}{UPDATED_LABEL_SUFFIX}",
        )
        self.validate(draft.values, draft.kind).raise_if_invalid()
        comparison = self.compare(draft.values, previous.values)
        measurement = self._persist(draft, comparison, retire=previous)
        logger.info("Medida %s reemplazada por la versión %s", previous.pk, measurement.pk)
        return measurement

    def delete(self, measurement_id: int) -> None:
        measurement = self._load(measurement_id)
        with store_errors("Error al eliminar medida"):
            measurement.delete()
        logger.info("Medida %s eliminada", measurement_id)

    def for_client(self, client_id: int) -> list[Measurement]:
        with store_errors("Error al obtener medidas"):
            return list(Measurement.objects.for_client(client_id).active())

    def latest_by_kind(self, client_id: int, kind: str) -> Optional[Measurement]:
        with store_errors("Error al obtener medidas"):
            return Measurement.objects.latest_active(client_id, kind)

    def get(self, measurement_id: int) -> Optional[Measurement]:
        with store_errors("Error al obtener medida"):
            return Measurement.objects.select_related("client").filter(pk=measurement_id).first()

    def history(self, client_id: int) -> list[Measurement]:
        with store_errors("Error al obtener historial de medidas"):
            return list(Measurement.objects.for_client(client_id))

    def search_by_label(self, client_id: int, term: str) -> list[Measurement]:
        with store_errors("Error al buscar medidas"):
            return list(Measurement.objects.for_client(client_id).filter(label__icontains=(term or "").strip()))

    def _previous_active(self, client_id: int, kind: str) -> Optional[Measurement]:
        # Comparison is informational; a failed lookup must not block the new record.
        try:
            return Measurement.objects.latest_active(client_id, kind)
        except DatabaseError:
            logger.warning("No se pudieron obtener medidas anteriores del cliente %s", client_id, exc_info=True)
            return None

    def _persist(
        self,
        draft: MeasurementDraft,
        comparison: MeasurementComparison,
        *,
        retire: Optional[Measurement] = None,
    ) -> Measurement:
        values = {name: float(_to_decimal(value)) for name, value in draft.values.items()}
        with store_errors("Error al crear medida"):
            with transaction.atomic():
                (
                    Measurement.objects.for_client(draft.client_id)
                    .of_kind(draft.kind)
                    .active()
                    .update(active=False)
                )
                if retire is not None and retire.active:
                    retire.active = False
                measurement = Measurement.objects.create(
                    client_id=draft.client_id,
                    kind=draft.kind,
                    values=values,
                    label=(draft.label or "").strip(),
                    taken_at=draft.taken_at or timezone.now(),
                    active=True,
                    has_extreme_changes=comparison.has_extreme_changes,
                    detected_changes=comparison.extreme_changes,
                )
        if comparison.has_extreme_changes:
            logger.info(
                "Medida %s del cliente %s con %s cambios fuera de tolerancia",
                measurement.pk,
                draft.client_id,
                len(comparison.extreme_changes),
            )
        return measurement

    def _load(self, measurement_id: int) -> Measurement:
        measurement = self.get(measurement_id)
        if measurement is None:
            raise NotFoundError("Medida no encontrada")
        return measurement
