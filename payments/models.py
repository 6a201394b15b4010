from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from sastreria.models import TimeStampedModel

from .managers import PaymentManager


class Payment(TimeStampedModel):
    class Concept(models.TextChoices):
        ADVANCE = "Anticipo", "Anticipo"
        INSTALLMENT = "Abono", "Abono"
        SETTLEMENT = "Liquidacion", "Liquidación"

    class Method(models.TextChoices):
        CASH = "Efectivo", "Efectivo"
        CARD = "Tarjeta", "Tarjeta"
        TRANSFER = "Transferencia", "Transferencia"

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payments",
        verbose_name="Pedido",
    )
    amount = models.DecimalField(
        "Monto",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    concept = models.CharField("Concepto", max_length=16, choices=Concept.choices)
    method = models.CharField("Método", max_length=16, choices=Method.choices, default=Method.CASH)
    notes = models.TextField("Notas", blank=True)
    paid_at = models.DateTimeField("Fecha de pago", default=timezone.now)
    registered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registered_payments",
        verbose_name="Registrado por",
    )

    objects = PaymentManager()

    class Meta:
        verbose_name = "Pago"
        verbose_name_plural = "Pagos"
        ordering = ("-paid_at", "-pk")

    def __str__(self) -> str:
        return f"{self.get_concept_display()} ${self.amount} (Pedido #{self.order_id})"
