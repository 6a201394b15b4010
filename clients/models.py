from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone

from .managers import ClientManager

PHONE_LENGTH = 10


class Client(models.Model):
    name = models.CharField("Nombre", max_length=150)
    phone = models.CharField(
        "Teléfono",
        max_length=PHONE_LENGTH,
        unique=True,
        validators=[RegexValidator(r"^\d{10}$", "El teléfono debe tener 10 dígitos")],
    )
    general_notes = models.TextField("Notas generales", null=True, blank=True)
    historical_debt = models.DecimalField(
        "Deuda histórica",
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    active = models.BooleanField("Activo", default=True)
    registration_date = models.DateTimeField("Fecha de registro", default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClientManager()

    class Meta:
        verbose_name = "Cliente"
        verbose_name_plural = "Clientes"
        ordering = ("name",)

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"
