"""Measurement field sets and fitting tolerances, in centimetres."""

from __future__ import annotations

from decimal import Decimal

TORSO = "Torso"
PANTALON = "Pantalon"

MEASUREMENT_FIELDS: dict[str, tuple[str, ...]] = {
    TORSO: (
        "largo_espalda",
        "ancho_hombro",
        "largo_manga",
        "pecho",
        "estomago",
        "cuello",
        "largo_frente",
    ),
    PANTALON: (
        "largo_pantalon",
        "tiro",
        "cintura",
        "cadera",
        "pierna",
        "rodilla",
        "pantorrilla",
        "campana",
    ),
}

FIT_TOLERANCES: dict[str, Decimal] = {
    "pecho": Decimal("5"),
    "estomago": Decimal("5"),
    "cintura": Decimal("5"),
    "cadera": Decimal("5"),
    "largo_manga": Decimal("3"),
    "largo_pantalon": Decimal("3"),
}
DEFAULT_TOLERANCE = Decimal("5")

MAX_VALUE = Decimal("300")


def tolerance_for(field_name: str) -> Decimal:
    return FIT_TOLERANCES.get(field_name, DEFAULT_TOLERANCE)
