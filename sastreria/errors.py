from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for every failure raised by the domain services."""

    default_message = "No fue posible completar la operación."
    status_code = 409

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ServiceValidationError(ServiceError):
    default_message = "Los datos enviados no son válidos."
    status_code = 400

    def __init__(self, *, field_errors: dict[str, str] | None = None, message: str | None = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}


class NotFoundError(ServiceError):
    default_message = "El registro solicitado no existe."
    status_code = 404


class StoreError(ServiceError):
    default_message = "Error al consultar la base de datos."
    status_code = 500


@dataclass(frozen=True)
class ValidationResult:
    errors: dict[str, str] = field(default_factory=dict)
    warnings: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise ServiceValidationError(field_errors=dict(self.errors))


@contextmanager
def store_errors(prefix: str) -> Iterator[None]:
    """Wrap database failures into a StoreError with a readable prefix."""
    try:
        yield
    except DatabaseError as exc:
        logger.exception("%s", prefix)
        raise StoreError(f"{prefix}: {exc}") from exc
