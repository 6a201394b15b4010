from __future__ import annotations

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .managers import MeasurementManager


class Measurement(models.Model):
    class Kind(models.TextChoices):
        TORSO = "Torso", "Torso"
        PANTALON = "Pantalon", "Pantalón"

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.CASCADE,
        related_name="measurements",
        verbose_name="Cliente",
    )
    kind = models.CharField("Tipo de medida", max_length=16, choices=Kind.choices)
    values = models.JSONField("Valores", default=dict)
    label = models.CharField("Etiqueta", max_length=150, blank=True)
    taken_at = models.DateTimeField("Fecha de toma", default=timezone.now)
    active = models.BooleanField("Activa", default=True)
    has_extreme_changes = models.BooleanField("Cambios extremos", default=False)
    detected_changes = models.JSONField("Cambios detectados", default=list, blank=True)

    objects = MeasurementManager()

    class Meta:
        verbose_name = "Medida"
        verbose_name_plural = "Medidas"
        ordering = ("-taken_at", "-pk")
        constraints = [
            models.UniqueConstraint(
                fields=("client", "kind"),
                condition=Q(active=True),
                name="unique_active_measurement_per_kind",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_kind_display()} - {self.label or 'Medida'}"
