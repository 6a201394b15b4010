from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase
from django.utils import timezone

from clients.models import Client
from orders.admin import OrderItemInline
from orders.models import Order


class OrderAdminTests(TestCase):
    def setUp(self) -> None:
        self.superuser = get_user_model().objects.create_superuser(email="root@sastreria.mx", password="secreto123")
        self.request = RequestFactory().get("/admin/orders/order/")
        self.request.user = self.superuser
        self.model_admin = admin.site._registry[Order]
        client = Client.objects.create(name="Juan Perez", phone="6861234567")
        self.order = Order.objects.create(
            client=client,
            service_type=Order.ServiceType.REMIENDO,
            description="Cambiar cierre",
            total_cost=Decimal("300"),
            pending_balance=Decimal("300"),
            promised_date=timezone.localdate() + timedelta(days=3),
        )

    def test_guarded_fields_are_read_only(self) -> None:
        readonly = self.model_admin.get_readonly_fields(self.request, self.order)

        for field_name in ("state", "total_cost", "pending_balance", "deleted", "deletion_reason", "deleted_by"):
            with self.subTest(field=field_name):
                self.assertIn(field_name, readonly)
        self.assertNotIn("description", readonly)

    def test_no_add_or_hard_delete(self) -> None:
        self.assertFalse(self.model_admin.has_add_permission(self.request))
        self.assertFalse(self.model_admin.has_delete_permission(self.request, self.order))

    def test_delivered_or_deleted_orders_are_fully_locked(self) -> None:
        inline = OrderItemInline(Order, admin.site)
        for changes in ({"state": Order.State.DELIVERED}, {"deleted": True}):
            with self.subTest(changes=changes):
                order = Order(pk=self.order.pk, **{**self._fields(), **changes})

                readonly = self.model_admin.get_readonly_fields(self.request, order)

                self.assertIn("description", readonly)
                self.assertIn("promised_date", readonly)
                self.assertFalse(inline.has_change_permission(self.request, order))
                self.assertFalse(inline.has_add_permission(self.request, order))

        self.assertTrue(inline.has_change_permission(self.request, self.order))

    def _fields(self) -> dict:
        return {
            "client_id": self.order.client_id,
            "service_type": self.order.service_type,
            "total_cost": self.order.total_cost,
            "promised_date": self.order.promised_date,
        }
