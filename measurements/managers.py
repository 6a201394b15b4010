from __future__ import annotations

from django.db import models


class MeasurementQuerySet(models.QuerySet):
    def active(self) -> "MeasurementQuerySet":
        return self.filter(active=True)

    def for_client(self, client_id: int) -> "MeasurementQuerySet":
        return self.filter(client_id=client_id)

    def of_kind(self, kind: str) -> "MeasurementQuerySet":
        return self.filter(kind=kind)

    def latest_active(self, client_id: int, kind: str):
        return self.for_client(client_id).of_kind(kind).active().order_by("-taken_at", "-pk").first()


MeasurementManager = models.Manager.from_queryset(MeasurementQuerySet)
