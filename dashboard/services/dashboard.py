from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from clients.models import Client
from orders.models import Order
from payments.models import Payment
from sastreria.errors import store_errors

URGENT_LIMIT = 10
RECENT_LIMIT = 5
ACTIVITY_LIMIT = 10
UPCOMING_LIMIT = 5
UPCOMING_DAYS = 7
WEEK_DAYS = 7
DEFAULT_REFRESH_SECONDS = 300

BOARD_STATES = (
    Order.State.WAITING,
    Order.State.IN_PROGRESS,
    Order.State.FITTING,
    Order.State.FINISHED,
)

MONTH_ABBREVIATIONS = ("ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sep", "oct", "nov", "dic")


def short_day_label(day: date) -> str:
    return f"{day.day:02d} {MONTH_ABBREVIATIONS[day.month - 1]}"


def _order_summary(order: Order, today: date) -> dict[str, Any]:
    return {
        "id": order.pk,
        "client": order.client.name,
        "phone": order.client.phone,
        "service_type": order.service_type,
        "state": order.state,
        "promised_date": order.promised_date,
        "pending_balance": order.pending_balance,
        "days_left": (order.promised_date - today).days,
    }


class DashboardService:
    """Read-only aggregates shown on the shop's front page."""

    def __init__(self, *, today: Optional[date] = None) -> None:
        self.today = today or timezone.localdate()

    def statistics(self) -> dict[str, Any]:
        month_start = self.today.replace(day=1)
        with store_errors("Error al obtener estadísticas"):
            urgent = list(
                Order.objects.due_by(self.today)
                .select_related("client")
                .order_by("promised_date", "pk")[:URGENT_LIMIT]
            )
            pending = Order.objects.outstanding().aggregate(total=Sum("pending_balance"))["total"]
            month_income = Payment.objects.between(month_start, self.today).aggregate(total=Sum("amount"))["total"]
            return {
                "active_orders": Order.objects.open().count(),
                "active_clients": Client.objects.active().count(),
                "pending_balance": pending or Decimal("0.00"),
                "urgent_orders": [_order_summary(order, self.today) for order in urgent],
                "urgent_count": len(urgent),
                "month_income": month_income or Decimal("0.00"),
            }

    def orders_by_state(self) -> dict[str, int]:
        counts = {state.value: 0 for state in BOARD_STATES}
        with store_errors("Error al obtener pedidos por estado"):
            rows = Order.objects.open().filter(state__in=counts).values_list("state", flat=True)
            for state in rows:
                counts[state] += 1
        return counts

    def weekly_income(self) -> list[dict[str, Any]]:
        start = self.today - timedelta(days=WEEK_DAYS - 1)
        totals = {start + timedelta(days=offset): Decimal("0.00") for offset in range(WEEK_DAYS)}
        with store_errors("Error al obtener ingresos de la semana"):
            for paid_at, amount in Payment.objects.between(start, self.today).values_list("paid_at", "amount"):
                day = timezone.localdate(paid_at)
                if day in totals:
                    totals[day] += amount
        return [
            {"date": day, "label": short_day_label(day), "amount": amount}
            for day, amount in totals.items()
        ]

    def recent_activity(self) -> list[dict[str, Any]]:
        with store_errors("Error al obtener actividad reciente"):
            orders = list(
                Order.objects.not_deleted().select_related("client").order_by("-created_at", "-pk")[:RECENT_LIMIT]
            )
            payments = list(Payment.objects.select_related("order__client").newest_first()[:RECENT_LIMIT])

        activity: list[dict[str, Any]] = [
            {
                "type": "order",
                "title": f"Nuevo pedido #{order.pk}",
                "description": f"{order.service_type} - {order.client.name or 'Cliente sin nombre'}",
                "date": order.created_at,
            }
            for order in orders
        ]
        activity.extend(
            {
                "type": "payment",
                "title": "Pago recibido",
                "description": f"${payment.amount:.2f} - {payment.concept} (Pedido #{payment.order_id})",
                "date": payment.paid_at,
            }
            for payment in payments
        )
        activity.sort(key=lambda entry: entry["date"], reverse=True)
        return activity[:ACTIVITY_LIMIT]

    def upcoming_deliveries(self) -> list[dict[str, Any]]:
        horizon = self.today + timedelta(days=UPCOMING_DAYS)
        with store_errors("Error al obtener próximos vencimientos"):
            orders = list(
                Order.objects.open()
                .filter(promised_date__gte=self.today, promised_date__lte=horizon)
                .select_related("client")
                .order_by("promised_date", "pk")[:UPCOMING_LIMIT]
            )
        return [_order_summary(order, self.today) for order in orders]

    def build_summary(self) -> dict[str, Any]:
        return {
            "statistics": self.statistics(),
            "orders_by_state": self.orders_by_state(),
            "weekly_income": self.weekly_income(),
            "recent_activity": self.recent_activity(),
            "upcoming_deliveries": self.upcoming_deliveries(),
            "refresh_interval": getattr(settings, "DASHBOARD_REFRESH_SECONDS", DEFAULT_REFRESH_SECONDS),
        }
