from __future__ import annotations

import re
from datetime import date

from django.db import models
from django.db.models import Q

DELIVERED = "Entregado"
ABANDONED = "Abandonado"
CLOSED_STATES = (DELIVERED, ABANDONED)
SEARCH_LIMIT = 20
# Ids are BigAutoField values, so longer numbers cannot match a row.
ORDER_ID_PATTERN = re.compile(r"^[0-9]{1,18}$")


class OrderQuerySet(models.QuerySet):
    def not_deleted(self) -> "OrderQuerySet":
        return self.filter(deleted=False)

    def for_client(self, client_id: int) -> "OrderQuerySet":
        return self.filter(client_id=client_id)

    def undelivered(self) -> "OrderQuerySet":
        return self.not_deleted().exclude(state=DELIVERED)

    def open(self) -> "OrderQuerySet":
        """Orders still being worked on: not deleted, delivered or abandoned."""
        return self.not_deleted().exclude(state__in=CLOSED_STATES)

    def outstanding(self) -> "OrderQuerySet":
        return self.undelivered().filter(pending_balance__gt=0)

    def due_by(self, day: date) -> "OrderQuerySet":
        return self.open().filter(promised_date__lte=day)

    def overdue(self, today: date) -> "OrderQuerySet":
        return self.undelivered().filter(promised_date__lt=today)

    def with_details(self) -> "OrderQuerySet":
        return self.select_related("client", "deleted_by").prefetch_related("items__measurement", "payments")

    def search(self, term: str) -> "OrderQuerySet":
        term = (term or "").strip()
        queryset = self.not_deleted()
        if term:
            condition = Q(group_name__icontains=term)
            if ORDER_ID_PATTERN.match(term):
                condition |= Q(pk=int(term))
            queryset = queryset.filter(condition)
        return queryset.order_by("-created_at", "-pk")[:SEARCH_LIMIT]


OrderManager = models.Manager.from_queryset(OrderQuerySet)
