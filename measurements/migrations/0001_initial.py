from __future__ import annotations

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Measurement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[("Torso", "Torso"), ("Pantalon", "Pantalón")],
                        max_length=16,
                        verbose_name="Tipo de medida",
                    ),
                ),
                ("values", models.JSONField(default=dict, verbose_name="Valores")),
                ("label", models.CharField(blank=True, max_length=150, verbose_name="Etiqueta")),
                ("taken_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Fecha de toma")),
                ("active", models.BooleanField(default=True, verbose_name="Activa")),
                ("has_extreme_changes", models.BooleanField(default=False, verbose_name="Cambios extremos")),
                ("detected_changes", models.JSONField(blank=True, default=list, verbose_name="Cambios detectados")),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="measurements",
                        to="clients.client",
                        verbose_name="Cliente",
                    ),
                ),
            ],
            options={
                "verbose_name": "Medida",
                "verbose_name_plural": "Medidas",
                "ordering": ("-taken_at", "-pk"),
            },
        ),
        migrations.AddConstraint(
            model_name="measurement",
            constraint=models.UniqueConstraint(
                condition=models.Q(("active", True)),
                fields=("client", "kind"),
                name="unique_active_measurement_per_kind",
            ),
        ),
    ]
