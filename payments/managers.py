from __future__ import annotations

from datetime import date

from django.db import models


class PaymentQuerySet(models.QuerySet):
    def for_order(self, order_id: int) -> "PaymentQuerySet":
        return self.filter(order_id=order_id)

    def for_client(self, client_id: int) -> "PaymentQuerySet":
        return self.filter(order__client_id=client_id)

    def on_day(self, day: date) -> "PaymentQuerySet":
        return self.filter(paid_at__date=day)

    def between(self, start: date, end: date) -> "PaymentQuerySet":
        return self.filter(paid_at__date__gte=start, paid_at__date__lte=end)

    def newest_first(self) -> "PaymentQuerySet":
        return self.order_by("-paid_at", "-pk")


PaymentManager = models.Manager.from_queryset(PaymentQuerySet)
