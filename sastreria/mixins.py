from __future__ import annotations

from django.contrib.auth.mixins import LoginRequiredMixin

from .api import json_error, service_error_response
from .errors import ServiceError


class ApiLoginRequiredMixin(LoginRequiredMixin):
    """Mixin that answers unauthenticated API calls with a JSON 401."""

    raise_exception = False

    def handle_no_permission(self):
        return json_error("Debes iniciar sesión.", status=401)


class RolePermissionMixin:
    """Restrict a view to users whose role grants ``required_permission``.

    ``required_permission`` maps HTTP methods to ``(module, action)`` pairs so a
    single view can guard reads and writes differently.
    """

    required_permission: dict[str, tuple[str, str]] = {}

    def dispatch(self, request, *args, **kwargs):
        user = getattr(request, "user", None)
        permission = self.required_permission.get(request.method.lower())
        if permission and user and user.is_authenticated:
            module, action = permission
            if not user.has_module_permission(module, action):
                return json_error("No tienes permiso para realizar esta acción.", status=403)
        return super().dispatch(request, *args, **kwargs)


class ServiceErrorMixin:
    """Render domain service failures as JSON responses."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except ServiceError as exc:
            return service_error_response(exc)
