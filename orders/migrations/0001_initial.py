from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
        ("measurements", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "service_type",
                    models.CharField(
                        choices=[("Confeccion", "Confección"), ("Remiendo", "Remiendo"), ("Renta", "Renta")],
                        max_length=16,
                        verbose_name="Tipo de servicio",
                    ),
                ),
                (
                    "state",
                    models.CharField(
                        choices=[
                            ("En Espera", "En Espera"),
                            ("En Proceso", "En Proceso"),
                            ("Prueba", "Prueba"),
                            ("Terminado", "Terminado"),
                            ("Entregado", "Entregado"),
                            ("Abandonado", "Abandonado"),
                        ],
                        default="En Espera",
                        max_length=16,
                        verbose_name="Estado",
                    ),
                ),
                ("group_name", models.CharField(blank=True, max_length=150, verbose_name="Nombre de grupo")),
                ("group_id", models.UUIDField(blank=True, db_index=True, null=True, verbose_name="Grupo")),
                ("description", models.TextField(blank=True, verbose_name="Instrucciones")),
                ("total_cost", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="Costo total")),
                (
                    "pending_balance",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12, verbose_name="Saldo pendiente"
                    ),
                ),
                ("promised_date", models.DateField(verbose_name="Fecha promesa")),
                ("last_contact_at", models.DateTimeField(blank=True, null=True, verbose_name="Último contacto")),
                ("deleted", models.BooleanField(default=False, verbose_name="Eliminado")),
                ("deletion_reason", models.TextField(blank=True, verbose_name="Motivo de eliminación")),
                ("deletion_date", models.DateTimeField(blank=True, null=True, verbose_name="Fecha de eliminación")),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="clients.client",
                        verbose_name="Cliente",
                    ),
                ),
                (
                    "deleted_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="deleted_orders",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Eliminado por",
                    ),
                ),
            ],
            options={
                "verbose_name": "Pedido",
                "verbose_name_plural": "Pedidos",
                "ordering": ("-created_at", "-pk"),
                "indexes": [models.Index(fields=["state", "promised_date"], name="order_state_promise_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("garment_type", models.CharField(max_length=100, verbose_name="Tipo de prenda")),
                ("description", models.TextField(blank=True, verbose_name="Descripción")),
                ("event_date", models.DateField(blank=True, null=True, verbose_name="Fecha del evento")),
                ("return_date", models.DateField(blank=True, null=True, verbose_name="Fecha de devolución")),
                (
                    "measurement",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_items",
                        to="measurements.measurement",
                        verbose_name="Medida",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                        verbose_name="Pedido",
                    ),
                ),
            ],
            options={
                "verbose_name": "Prenda del pedido",
                "verbose_name_plural": "Prendas del pedido",
                "ordering": ("pk",),
            },
        ),
    ]
