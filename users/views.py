from __future__ import annotations

from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views import View

from sastreria.api import load_json_body
from sastreria.mixins import ServiceErrorMixin
from sastreria.views import ApiView

from .models import UserProfile
from .permissions import ROLE_PERMISSIONS
from .services import AuthService


def _user_payload(user: UserProfile) -> dict[str, Any]:
    return {
        "id": user.pk,
        "email": user.email,
        "full_name": user.get_full_name(),
        "role": user.role,
        "role_label": user.get_role_display(),
        "permissions": ROLE_PERMISSIONS.get(user.role, {}),
    }


class LoginView(ServiceErrorMixin, View):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        payload, error = load_json_body(request)
        if error:
            return error
        user = AuthService(request=request).login(payload.get("email", ""), payload.get("password", ""))
        return JsonResponse({"user": _user_payload(user)})


class LogoutView(ApiView):
    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        AuthService(request=request).logout()
        return JsonResponse({"status": "logged_out"})


class CurrentUserView(ApiView):
    http_method_names = ["get"]

    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        user = AuthService(request=request).current_user()
        return JsonResponse({"user": _user_payload(user)})
