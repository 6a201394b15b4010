from __future__ import annotations

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone

from .managers import UserProfileManager
from .permissions import role_allows


class UserProfile(AbstractBaseUser, PermissionsMixin):
    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Administrador"
        OPERADOR = "OPERADOR", "Operador"

    email = models.EmailField("Correo", unique=True)
    full_name = models.CharField("Nombre completo", max_length=150, blank=True)
    role = models.CharField(
        "Rol",
        max_length=16,
        choices=Role.choices,
        default=Role.OPERADOR,
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = UserProfileManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        verbose_name = "Usuario"
        verbose_name_plural = "Usuarios"
        ordering = ["full_name", "email"]

    def __str__(self) -> str:
        return self.full_name or self.email

    def get_full_name(self) -> str:
        return self.full_name or self.email

    def get_short_name(self) -> str:
        return self.full_name.split(" ")[0] if self.full_name else self.email

    def has_module_permission(self, module: str, action: str) -> bool:
        if not self.is_active:
            return False
        if self.is_superuser:
            return True
        return role_allows(self.role, module, action)
