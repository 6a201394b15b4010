from __future__ import annotations

from typing import Any

from django.http import HttpRequest, JsonResponse

from sastreria.views import ApiView

from .services import DashboardService


class DashboardView(ApiView):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        return JsonResponse(DashboardService().build_summary())
