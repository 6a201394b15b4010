from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

from django.db import OperationalError
from django.test import RequestFactory, SimpleTestCase

from sastreria.api import load_json_body, parse_date, parse_decimal, parse_int, service_error_response
from sastreria.errors import NotFoundError, ServiceError, ServiceValidationError, StoreError, ValidationResult, store_errors


class ServiceErrorResponseTests(SimpleTestCase):
    def test_status_codes(self) -> None:
        cases = [
            (ServiceValidationError(field_errors={"monto": "El monto debe ser mayor a 0"}), 400),
            (NotFoundError("Pedido no encontrado"), 404),
            (StoreError("Error al crear cliente: locked"), 500),
            (ServiceError("Regla de negocio"), 409),
        ]
        for exc, status in cases:
            with self.subTest(exc=exc):
                self.assertEqual(service_error_response(exc).status_code, status)

    def test_validation_errors_are_included(self) -> None:
        response = service_error_response(ServiceValidationError(field_errors={"nombre": "El nombre es obligatorio"}))

        self.assertEqual(json.loads(response.content)["errors"], {"nombre": "El nombre es obligatorio"})

    def test_store_errors_prefix_database_failures(self) -> None:
        with self.assertLogs("sastreria.errors", level="ERROR") as logs:
            with self.assertRaises(StoreError) as ctx:
                with store_errors("Error al crear cliente"):
                    raise OperationalError("database is locked")

        self.assertEqual(ctx.exception.message, "Error al crear cliente: database is locked")
        self.assertEqual(logs.records[0].getMessage(), "Error al crear cliente")
        self.assertIsNotNone(logs.records[0].exc_info)

    def test_validation_result(self) -> None:
        self.assertTrue(ValidationResult(warnings=[{"tipo": "sobrepago"}]).is_valid)
        with self.assertRaises(ServiceValidationError):
            ValidationResult(errors={"monto": "El monto debe ser mayor a 0"}).raise_if_invalid()


class RequestParsingTests(SimpleTestCase):
    def setUp(self) -> None:
        self.factory = RequestFactory()

    def test_load_json_body(self) -> None:
        payload, error = load_json_body(self.factory.post("/", data='{"a": 1}', content_type="application/json"))
        self.assertEqual(payload, {"a": 1})
        self.assertIsNone(error)

        _, error = load_json_body(self.factory.post("/", data="[1, 2]", content_type="application/json"))
        self.assertEqual(error.status_code, 400)

        _, error = load_json_body(self.factory.post("/", data="{", content_type="application/json"))
        self.assertEqual(error.status_code, 400)

    def test_parsers(self) -> None:
        self.assertEqual(parse_date("2025-10-19T08:00:00"), date(2025, 10, 19))
        self.assertIsNone(parse_date("19/10/2025"))
        self.assertEqual(parse_decimal("12.50"), Decimal("12.50"))
        self.assertIsNone(parse_decimal("doce"))
        self.assertEqual(parse_int("7"), 7)
        self.assertIsNone(parse_int(None))
        self.assertIsNone(parse_int(True))
