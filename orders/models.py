from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Sum

from sastreria.models import TimeStampedModel

from .managers import OrderManager


class Order(TimeStampedModel):
    class State(models.TextChoices):
        WAITING = "En Espera", "En Espera"
        IN_PROGRESS = "En Proceso", "En Proceso"
        FITTING = "Prueba", "Prueba"
        FINISHED = "Terminado", "Terminado"
        DELIVERED = "Entregado", "Entregado"
        ABANDONED = "Abandonado", "Abandonado"

    class ServiceType(models.TextChoices):
        CONFECCION = "Confeccion", "Confección"
        REMIENDO = "Remiendo", "Remiendo"
        RENTA = "Renta", "Renta"

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        related_name="orders",
        verbose_name="Cliente",
    )
    service_type = models.CharField("Tipo de servicio", max_length=16, choices=ServiceType.choices)
    state = models.CharField("Estado", max_length=16, choices=State.choices, default=State.WAITING)
    group_name = models.CharField("Nombre de grupo", max_length=150, blank=True)
    group_id = models.UUIDField("Grupo", null=True, blank=True, db_index=True)
    description = models.TextField("Instrucciones", blank=True)
    total_cost = models.DecimalField("Costo total", max_digits=12, decimal_places=2)
    pending_balance = models.DecimalField(
        "Saldo pendiente",
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    promised_date = models.DateField("Fecha promesa")
    last_contact_at = models.DateTimeField("Último contacto", null=True, blank=True)
    deleted = models.BooleanField("Eliminado", default=False)
    deletion_reason = models.TextField("Motivo de eliminación", blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deleted_orders",
        verbose_name="Eliminado por",
    )
    deletion_date = models.DateTimeField("Fecha de eliminación", null=True, blank=True)

    objects = OrderManager()

    class Meta:
        verbose_name = "Pedido"
        verbose_name_plural = "Pedidos"
        ordering = ("-created_at", "-pk")
        indexes = [
            models.Index(fields=("state", "promised_date"), name="order_state_promise_idx"),
        ]

    def __str__(self) -> str:
        return f"Pedido #{self.pk} - {self.get_service_type_display()}"

    @property
    def is_delivered(self) -> bool:
        return self.state == self.State.DELIVERED

    def total_paid(self) -> Decimal:
        return self.payments.aggregate(total=Sum("amount"))["total"] or Decimal("0.00")

    def refresh_pending_balance(self, *, save: bool = True) -> Decimal:
        """Recompute ``pending_balance`` from the recorded payments, floored at zero."""
        balance = self.total_cost - self.total_paid()
        self.pending_balance = max(balance, Decimal("0.00"))
        if save:
            self.save(update_fields=["pending_balance", "updated_at"])
        return self.pending_balance


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items", verbose_name="Pedido")
    measurement = models.ForeignKey(
        "measurements.Measurement",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
        verbose_name="Medida",
    )
    garment_type = models.CharField("Tipo de prenda", max_length=100)
    description = models.TextField("Descripción", blank=True)
    event_date = models.DateField("Fecha del evento", null=True, blank=True)
    return_date = models.DateField("Fecha de devolución", null=True, blank=True)

    class Meta:
        verbose_name = "Prenda del pedido"
        verbose_name_plural = "Prendas del pedido"
        ordering = ("pk",)

    def __str__(self) -> str:
        return self.garment_type
