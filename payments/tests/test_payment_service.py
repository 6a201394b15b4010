from __future__ import annotations

from datetime import datetime, time, timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from clients.models import Client
from orders.models import Order
from orders.services import OrderDeletedError
from payments.models import Payment
from payments.services import (
    OverpaymentConfirmationRequired,
    PaymentDraft,
    PaymentService,
    build_payments_workbook,
)
from sastreria.errors import NotFoundError, ServiceValidationError


class PaymentTestMixin:
    def setUp(self) -> None:
        self.today = timezone.localdate()
        self.client_record = Client.objects.create(name="Juan Perez", phone="6861234567")
        self.order = Order.objects.create(
            client=self.client_record,
            service_type=Order.ServiceType.REMIENDO,
            description="Cambiar cierre",
            total_cost=Decimal("100"),
            pending_balance=Decimal("100"),
            promised_date=self.today + timedelta(days=2),
        )
        self.service = PaymentService()

    def _pay(self, amount: str, *, concept: str = Payment.Concept.INSTALLMENT, method: str = Payment.Method.CASH, **kwargs):
        return Payment.objects.create(order=self.order, amount=Decimal(amount), concept=concept, method=method, **kwargs)

    def _draft(self, amount: str, **overrides) -> PaymentDraft:
        values = {
            "order_id": self.order.pk,
            "amount": Decimal(amount),
            "concept": Payment.Concept.INSTALLMENT,
            "method": Payment.Method.CASH,
        }
        values.update(overrides)
        return PaymentDraft(**values)


class PaymentRegistrationTests(PaymentTestMixin, TestCase):
    def test_balance_follows_payments(self) -> None:
        payment = self.service.register(self._draft("30"))

        self.order.refresh_from_db()
        self.assertEqual(self.order.pending_balance, Decimal("70"))
        self.assertEqual(self.service.total_paid(self.order.pk), Decimal("30"))

        self.service.delete(payment.pk)
        self.order.refresh_from_db()
        self.assertEqual(self.order.pending_balance, Decimal("100"))

    def test_field_errors(self) -> None:
        with self.assertRaises(ServiceValidationError) as ctx:
            self.service.register(self._draft("0", concept="", method="Cheque"))

        self.assertEqual(
            ctx.exception.field_errors,
            {
                "monto": "El monto debe ser mayor a 0",
                "concepto": "El concepto es obligatorio",
                "metodo": "Método de pago inválido",
            },
        )

    def test_fractions_of_a_cent_are_rejected(self) -> None:
        with self.assertRaises(ServiceValidationError) as ctx:
            self.service.register(self._draft("0.004"))

        self.assertEqual(ctx.exception.field_errors, {"monto": "El monto no puede tener más de 2 decimales"})
        self.assertFalse(Payment.objects.exists())

        payment = self._pay("10")
        with self.assertRaises(ServiceValidationError):
            self.service.update(payment.pk, {"amount": Decimal("10.125")})
        payment.refresh_from_db()
        self.assertEqual(payment.amount, Decimal("10.00"))
        self.assertGreater(self.service.register(self._draft("0.01")).amount, 0)

    def test_overpayment_requires_confirmation(self) -> None:
        self._pay("70")

        with self.assertRaises(OverpaymentConfirmationRequired) as ctx:
            self.service.register(self._draft("50"))

        warning = ctx.exception.warnings[0]
        self.assertEqual(ctx.exception.message, "Sobrepago detectado")
        self.assertEqual(warning["tipo"], "sobrepago")
        self.assertEqual(warning["excedente"], Decimal("20"))
        self.assertEqual(warning["mensaje"], "El cliente pagaría $20.00 de más")
        self.assertEqual(warning["detalles"]["nuevo_total"], Decimal("120"))
        self.assertEqual(Payment.objects.count(), 1)

    def test_confirmed_overpayment_is_recorded(self) -> None:
        self._pay("70")

        self.service.register(self._draft("50", confirm_overpayment=True))

        self.order.refresh_from_db()
        self.assertEqual(self.order.pending_balance, Decimal("0"))
        self.assertEqual(self.service.total_paid(self.order.pk), Decimal("120"))

    def test_validate_keeps_overpayment_as_warning(self) -> None:
        self._pay("70")

        result = self.service.validate(self._draft("50"), self.order)

        self.assertTrue(result.is_valid)
        self.assertEqual(len(result.warnings), 1)

    def test_unknown_or_deleted_order(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.service.register(self._draft("10", order_id=999))
        self.assertEqual(ctx.exception.message, "Pedido no encontrado")

        Order.objects.filter(pk=self.order.pk).update(deleted=True)
        with self.assertRaises(OrderDeletedError):
            self.service.register(self._draft("10"))

    def test_update_override(self) -> None:
        payment = self._pay("40")

        self.service.update(payment.pk, {"amount": Decimal("60"), "method": Payment.Method.TRANSFER})

        self.order.refresh_from_db()
        self.assertEqual(self.order.pending_balance, Decimal("40"))
        with self.assertRaises(ServiceValidationError):
            self.service.update(payment.pk, {"amount": Decimal("-1")})
        with self.assertRaises(NotFoundError):
            self.service.update(999, {"amount": Decimal("1")})


class PaymentReportTests(PaymentTestMixin, TestCase):
    def test_daily_summary(self) -> None:
        self._pay("40", concept=Payment.Concept.ADVANCE, method=Payment.Method.CASH)
        self._pay("25.50", method=Payment.Method.CARD)
        self._pay("10", concept=Payment.Concept.SETTLEMENT, method=Payment.Method.TRANSFER)
        yesterday = timezone.make_aware(datetime.combine(self.today - timedelta(days=1), time(12)))
        self._pay("5", paid_at=yesterday)

        summary = self.service.daily_summary()

        self.assertEqual(summary["cash"], Decimal("40"))
        self.assertEqual(summary["card"], Decimal("25.50"))
        self.assertEqual(summary["transfer"], Decimal("10"))
        self.assertEqual(summary["total"], Decimal("75.50"))
        self.assertEqual(summary["transactions"], 3)
        self.assertEqual((summary["advances"], summary["installments"], summary["settlements"]), (1, 1, 1))
        self.assertEqual(self.service.daily_summary(self.today - timedelta(days=1))["total"], Decimal("5"))

    def test_reads(self) -> None:
        self._pay("10")
        self._pay("20")

        self.assertEqual(len(self.service.for_order(self.order.pk)), 2)
        self.assertEqual(len(self.service.for_client(self.client_record.pk)), 2)
        self.assertEqual(len(self.service.in_range(self.today, self.today)), 2)
        self.assertEqual(self.service.in_range(self.today + timedelta(days=1), self.today + timedelta(days=2)), [])

    def test_workbook_export(self) -> None:
        self._pay("10", notes="Primer abono")
        self._pay("15.25")

        workbook = build_payments_workbook(self.today, self.today)

        sheet = workbook.active
        self.assertEqual(sheet.title, "Pagos")
        self.assertEqual([cell.value for cell in sheet[3]], ["Fecha", "Pedido", "Cliente", "Concepto", "Método", "Monto", "Notas"])
        self.assertEqual(sheet.cell(row=4, column=3).value, "Juan Perez")
        self.assertEqual(sheet.cell(row=sheet.max_row, column=1).value, "TOTAL")
        self.assertEqual(Decimal(str(sheet.cell(row=sheet.max_row, column=6).value)), Decimal("25.25"))
