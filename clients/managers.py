from __future__ import annotations

from django.db import models
from django.db.models import Q


class ClientQuerySet(models.QuerySet):
    def active(self) -> "ClientQuerySet":
        return self.filter(active=True)

    def search(self, term: str) -> "ClientQuerySet":
        """Active clients whose name or phone contains ``term`` (case-insensitive)."""
        term = (term or "").strip()
        queryset = self.active()
        if term:
            queryset = queryset.filter(Q(name__icontains=term) | Q(phone__icontains=term))
        return queryset.order_by("name")


ClientManager = models.Manager.from_queryset(ClientQuerySet)
