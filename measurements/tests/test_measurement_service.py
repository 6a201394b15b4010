from __future__ import annotations

from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from clients.models import Client
from measurements.models import Measurement
from measurements.services import MeasurementDraft, MeasurementService
from sastreria.errors import NotFoundError, ServiceValidationError


class MeasurementValidationTests(TestCase):
    def setUp(self) -> None:
        self.service = MeasurementService()

    def test_non_mapping_values_fail_with_general_error(self) -> None:
        for values in (None, [], "pecho=100", {}):
            result = self.service.validate(values, "Torso")
            self.assertEqual(result.errors, {"general": "Los valores de medidas son obligatorios"})

    def test_reports_one_error_per_field(self) -> None:
        result = self.service.validate(
            {"pecho": "abc", "cuello": -2, "largo_manga": 301, "estomago": "90.125", "ancho_hombro": "45.5"},
            "Torso",
        )

        self.assertEqual(result.errors["pecho"], "Debe ser un número positivo")
        self.assertEqual(result.errors["cuello"], "Debe ser un número positivo")
        self.assertEqual(result.errors["largo_manga"], "Valor demasiado grande (máximo 300 cm)")
        self.assertEqual(result.errors["estomago"], "Máximo 2 decimales permitidos")
        self.assertNotIn("ancho_hombro", result.errors)

    def test_rejects_fields_from_other_kind(self) -> None:
        result = self.service.validate({"cintura": 80}, "Torso")

        self.assertIn("cintura", result.errors)

    def test_rejects_unknown_kind(self) -> None:
        result = self.service.validate({"pecho": 100}, "Falda")

        self.assertIn("tipo", result.errors)

    def test_accepts_valid_values(self) -> None:
        result = self.service.validate({"cintura": 80, "cadera": "98.25", "tiro": 27.5}, "Pantalon")

        self.assertTrue(result.is_valid)


class MeasurementComparisonTests(TestCase):
    def setUp(self) -> None:
        self.service = MeasurementService()

    def test_flags_change_beyond_tolerance(self) -> None:
        comparison = self.service.compare({"pecho": 108}, {"pecho": 100})

        self.assertEqual(len(comparison.extreme_changes), 1)
        change = comparison.extreme_changes[0]
        self.assertEqual(change["campo"], "pecho")
        self.assertEqual(change["diferencia"], 8)
        self.assertEqual(change["tolerancia"], 5)
        self.assertEqual(change["porcentaje"], 8.0)
        self.assertTrue(comparison.differences["pecho"]["aumento"])

    def test_uses_field_specific_tolerance(self) -> None:
        comparison = self.service.compare({"largo_manga": 60, "cuello": 44}, {"largo_manga": 64, "cuello": 40})

        self.assertEqual([c["campo"] for c in comparison.extreme_changes], ["largo_manga"])
        self.assertFalse(comparison.differences["largo_manga"]["aumento"])
        self.assertEqual(comparison.differences["cuello"]["diferencia"], 4)

    def test_only_compares_shared_fields(self) -> None:
        comparison = self.service.compare({"pecho": 100, "cuello": 40}, {"pecho": 100})

        self.assertEqual(list(comparison.differences), ["pecho"])
        self.assertFalse(comparison.has_extreme_changes)

    def test_without_previous_values(self) -> None:
        comparison = self.service.compare({"pecho": 100}, None)

        self.assertEqual(comparison.extreme_changes, [])
        self.assertEqual(comparison.differences, {})


class MeasurementServiceTests(TestCase):
    def setUp(self) -> None:
        self.service = MeasurementService()
        self.client_record = Client.objects.create(name="Juan Perez", phone="6861234567")

    def _draft(self, values, kind: str = "Torso", label: str = "Traje boda") -> MeasurementDraft:
        return MeasurementDraft(client_id=self.client_record.pk, kind=kind, values=values, label=label)

    def test_create_first_measurement(self) -> None:
        measurement = self.service.create(self._draft({"pecho": 100, "cuello": "40.5"}))

        self.assertTrue(measurement.active)
        self.assertFalse(measurement.has_extreme_changes)
        self.assertEqual(measurement.values, {"pecho": 100.0, "cuello": 40.5})

    def test_new_measurement_retires_previous_of_same_kind(self) -> None:
        first = self.service.create(self._draft({"pecho": 100}))
        pants = self.service.create(self._draft({"cintura": 80}, kind="Pantalon"))
        second = self.service.create(self._draft({"pecho": 108}))

        first.refresh_from_db()
        pants.refresh_from_db()
        self.assertFalse(first.active)
        self.assertTrue(pants.active)
        self.assertTrue(second.active)
        self.assertEqual(
            Measurement.objects.for_client(self.client_record.pk).of_kind("Torso").active().count(),
            1,
        )
        self.assertTrue(second.has_extreme_changes)
        self.assertEqual(second.detected_changes[0]["campo"], "pecho")

    def test_create_for_unknown_client(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.create(MeasurementDraft(client_id=999, kind="Torso", values={"pecho": 100}))

    def test_invalid_values_are_not_persisted(self) -> None:
        with self.assertRaises(ServiceValidationError) as ctx:
            self.service.create(self._draft({"pecho": 0}))

        self.assertIn("pecho", ctx.exception.field_errors)
        self.assertFalse(Measurement.objects.exists())

    def test_previous_lookup_failure_does_not_block_creation(self) -> None:
        self.service.create(self._draft({"pecho": 100}))

        with mock.patch.object(Measurement.objects, "latest_active", side_effect=DatabaseError("timeout")):
            with self.assertLogs("measurements.services.measurements", level="WARNING"):
                measurement = self.service.create(self._draft({"pecho": 120}))

        self.assertTrue(measurement.active)
        self.assertFalse(measurement.has_extreme_changes)

    def test_create_new_version(self) -> None:
        original = self.service.create(self._draft({"pecho": 100, "cuello": 40}))

        version = self.service.create_new_version(original.pk, {"pecho": 108, "cuello": 41})

        original.refresh_from_db()
        self.assertFalse(original.active)
        self.assertTrue(version.active)
        self.assertEqual(version.label, "Traje boda (Actualizada)")
        self.assertEqual(version.kind, "Torso")
        self.assertEqual(version.detected_changes[0]["porcentaje"], 8.0)
        self.assertEqual(len(self.service.history(self.client_record.pk)), 2)

    def test_create_new_version_of_unlabelled_measurement(self) -> None:
        original = self.service.create(self._draft({"cintura": 80}, kind="Pantalon", label=""))

        version = self.service.create_new_version(original.pk, {"cintura": 82})

        self.assertEqual(version.label, "Medida (Actualizada)")

    def test_create_new_version_missing(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.create_new_version(999, {"pecho": 100})

    def test_delete_is_permanent(self) -> None:
        measurement = self.service.create(self._draft({"pecho": 100}))

        self.service.delete(measurement.pk)

        self.assertIsNone(self.service.get(measurement.pk))
        with self.assertRaises(NotFoundError):
            self.service.delete(measurement.pk)

    def test_reads(self) -> None:
        self.service.create(self._draft({"pecho": 100}, label="Traje gris"))
        latest = self.service.create(self._draft({"pecho": 101}, label="Traje azul"))
        pants = self.service.create(self._draft({"cintura": 80}, kind="Pantalon", label="Pantalón gris"))

        self.assertEqual({m.pk for m in self.service.for_client(self.client_record.pk)}, {latest.pk, pants.pk})
        self.assertEqual(self.service.latest_by_kind(self.client_record.pk, "Torso"), latest)
        self.assertEqual(len(self.service.search_by_label(self.client_record.pk, "gris")), 2)
