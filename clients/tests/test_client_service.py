from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from clients.models import Client
from clients.services import ClientService, DuplicatePhoneError, HasActiveBalanceError
from orders.models import Order
from sastreria.errors import NotFoundError, ServiceValidationError


class ClientValidationTests(TestCase):
    def setUp(self) -> None:
        self.service = ClientService()

    def test_requires_name_and_phone(self) -> None:
        result = self.service.validate({"name": "  ", "phone": ""})

        self.assertFalse(result.is_valid)
        self.assertEqual(result.errors["nombre"], "El nombre es obligatorio")
        self.assertEqual(result.errors["telefono"], "El teléfono es obligatorio")

    def test_rejects_short_name_and_incomplete_phone(self) -> None:
        result = self.service.validate({"name": "Al", "phone": "686-123-456"})

        self.assertEqual(result.errors["nombre"], "El nombre debe tener al menos 3 caracteres")
        self.assertEqual(result.errors["telefono"], "El teléfono debe tener 10 dígitos")

    def test_accepts_formatted_phone(self) -> None:
        result = self.service.validate({"name": "Ana López", "phone": "(686) 123-4567"})

        self.assertTrue(result.is_valid)

    def test_clean_normalizes_fields(self) -> None:
        cleaned = self.service.clean(
            {"name": "  Ana López ", "phone": "686 123 4567", "general_notes": "   ", "historical_debt": "-15"}
        )

        self.assertEqual(cleaned["name"], "Ana López")
        self.assertEqual(cleaned["phone"], "6861234567")
        self.assertIsNone(cleaned["general_notes"])
        self.assertEqual(cleaned["historical_debt"], Decimal("0.00"))


class ClientServiceTests(TestCase):
    def setUp(self) -> None:
        self.service = ClientService()

    def _order_for(self, client: Client, *, state: str = Order.State.IN_PROGRESS, balance: str = "200") -> Order:
        return Order.objects.create(
            client=client,
            service_type=Order.ServiceType.REMIENDO,
            state=state,
            description="Ajustar bastilla",
            total_cost=Decimal("500"),
            pending_balance=Decimal(balance),
            promised_date=timezone.localdate() + timedelta(days=3),
        )

    def test_create_client(self) -> None:
        client = self.service.create({"name": "Juan Perez", "phone": "6861234567"})

        self.assertTrue(client.active)
        self.assertEqual(client.historical_debt, Decimal("0.00"))
        self.assertIsNone(client.general_notes)
        self.assertEqual(Client.objects.get(pk=client.pk).phone, "6861234567")

    def test_create_with_invalid_phone_raises_field_error(self) -> None:
        with self.assertRaises(ServiceValidationError) as ctx:
            self.service.create({"name": "Juan Perez", "phone": "12345"})

        self.assertIn("telefono", ctx.exception.field_errors)
        self.assertFalse(Client.objects.exists())

    def test_duplicate_phone_is_reported(self) -> None:
        self.service.create({"name": "Juan Perez", "phone": "6861234567"})

        with self.assertRaises(DuplicatePhoneError):
            self.service.create({"name": "Pedro Ruiz", "phone": "686-123-4567"})
        self.assertEqual(Client.objects.count(), 1)

    def test_update_changes_fields(self) -> None:
        client = self.service.create({"name": "Juan Perez", "phone": "6861234567"})

        updated = self.service.update(
            client.pk,
            {"name": "Juan Pérez Soto", "phone": "6869876543", "general_notes": "Prefiere botones negros"},
        )

        self.assertEqual(updated.name, "Juan Pérez Soto")
        self.assertEqual(updated.phone, "6869876543")
        self.assertEqual(updated.general_notes, "Prefiere botones negros")

    def test_update_to_existing_phone_fails(self) -> None:
        self.service.create({"name": "Juan Perez", "phone": "6861234567"})
        other = self.service.create({"name": "Pedro Ruiz", "phone": "6869999999"})

        with self.assertRaises(DuplicatePhoneError):
            self.service.update(other.pk, {"name": "Pedro Ruiz", "phone": "6861234567"})

    def test_update_missing_client(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.update(999, {"name": "Juan Perez", "phone": "6861234567"})

    def test_deactivate_blocked_by_outstanding_order(self) -> None:
        client = self.service.create({"name": "Juan Perez", "phone": "6861234567"})
        self._order_for(client)

        with self.assertRaises(HasActiveBalanceError):
            self.service.deactivate(client.pk)
        client.refresh_from_db()
        self.assertTrue(client.active)

    def test_deactivate_ignores_delivered_and_deleted_orders(self) -> None:
        client = self.service.create({"name": "Juan Perez", "phone": "6861234567"})
        self._order_for(client, state=Order.State.DELIVERED)
        deleted = self._order_for(client)
        deleted.deleted = True
        deleted.save()

        self.service.deactivate(client.pk)

        client.refresh_from_db()
        self.assertFalse(client.active)

    def test_deactivate_is_idempotent(self) -> None:
        client = self.service.create({"name": "Juan Perez", "phone": "6861234567"})

        self.service.deactivate(client.pk)
        again = self.service.deactivate(client.pk)

        self.assertFalse(again.active)
        self.assertEqual(Client.objects.active().count(), 0)

    def test_reactivate(self) -> None:
        client = self.service.create({"name": "Juan Perez", "phone": "6861234567"})
        self.service.deactivate(client.pk)

        self.assertTrue(self.service.reactivate(client.pk).active)

    def test_search_matches_name_or_phone(self) -> None:
        self.service.create({"name": "Juan Perez", "phone": "6861234567"})
        self.service.create({"name": "Ana López", "phone": "6867654321"})
        inactive = self.service.create({"name": "Juana Ruiz", "phone": "6860000000"})
        self.service.deactivate(inactive.pk)

        self.assertEqual([c.name for c in self.service.search("juan")], ["Juan Perez"])
        self.assertEqual([c.name for c in self.service.search("765")], ["Ana López"])
        self.assertEqual([c.name for c in self.service.search("  ")], ["Ana López", "Juan Perez"])

    def test_get_all_can_include_inactive(self) -> None:
        self.service.create({"name": "Juan Perez", "phone": "6861234567"})
        inactive = self.service.create({"name": "Ana López", "phone": "6867654321"})
        self.service.deactivate(inactive.pk)

        self.assertEqual(len(self.service.get_all()), 1)
        self.assertEqual(len(self.service.get_all(include_inactive=True)), 2)
        self.assertIsNone(self.service.get(999))

    def test_statistics(self) -> None:
        client = self.service.create({"name": "Juan Perez", "phone": "6861234567"})
        self._order_for(client, balance="200")
        self._order_for(client, balance="150")
        latest = self._order_for(client, state=Order.State.DELIVERED, balance="0")

        stats = self.service.statistics(client.pk)

        self.assertEqual(stats["total_orders"], 3)
        self.assertEqual(stats["pending_balance"], Decimal("350"))
        self.assertEqual(stats["last_order_date"], latest.created_at)
