from __future__ import annotations

import logging
from typing import Callable, Optional

from django.contrib.auth import authenticate
from django.contrib.auth import login as django_login
from django.contrib.auth import logout as django_logout
from django.contrib.auth.signals import user_logged_in, user_logged_out
from django.core.exceptions import ValidationError
from django.core.validators import validate_email as django_validate_email
from django.http import HttpRequest

from sastreria.errors import ServiceError

from ..models import UserProfile

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthChangeCallback = Callable[[str, Optional[UserProfile]], None]


class AuthenticationFailed(ServiceError):
    default_message = "Email o contraseña incorrectos"
    status_code = 401


class AuthService:
    def __init__(self, *, request: HttpRequest) -> None:
        self.request = request

    def current_user(self) -> Optional[UserProfile]:
        user = getattr(self.request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return user

    def login(self, email: str, password: str) -> UserProfile:
        email = (email or "").strip()
        if not self.validate_email(email):
            raise AuthenticationFailed("Email inválido")
        if not password:
            raise AuthenticationFailed("La contraseña es obligatoria")
        user = authenticate(self.request, username=email, password=password)
        if user is None:
            logger.info("Intento de inicio de sesión fallido para %s", email)
            raise AuthenticationFailed()
        django_login(self.request, user)
        logger.info("Inicio de sesión exitoso: %s", user.email)
        return user

    def logout(self) -> None:
        django_logout(self.request)

    @staticmethod
    def on_auth_change(callback: AuthChangeCallback) -> Callable[[], None]:
        """Subscribe ``callback(event, user)`` to login/logout events.

        Returns a function that removes the subscription.
        """

        def _signed_in(sender, request, user, **kwargs) -> None:
            callback(SIGNED_IN, user)

        def _signed_out(sender, request, user, **kwargs) -> None:
            callback(SIGNED_OUT, user)

        user_logged_in.connect(_signed_in, weak=False)
        user_logged_out.connect(_signed_out, weak=False)

        def unsubscribe() -> None:
            user_logged_in.disconnect(_signed_in)
            user_logged_out.disconnect(_signed_out)

        return unsubscribe

    @staticmethod
    def validate_email(email: str) -> bool:
        try:
            django_validate_email(email)
        except ValidationError:
            return False
        return True

    @staticmethod
    def validate_password(password: str | None) -> tuple[bool, str]:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            return False, f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
        return True, ""
