from __future__ import annotations

from django.http import JsonResponse
from django.views import View

from .mixins import ApiLoginRequiredMixin, RolePermissionMixin, ServiceErrorMixin


class ApiView(ApiLoginRequiredMixin, RolePermissionMixin, ServiceErrorMixin, View):
    """Base class for authenticated JSON endpoints."""


def health_view(request):
    return JsonResponse({"status": "ok"})
