from __future__ import annotations

from django import forms
from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin
from django.contrib.auth.forms import ReadOnlyPasswordHashField
from django.utils.translation import gettext_lazy as _

from .models import UserProfile
from .services import AuthService


class UserCreationForm(forms.ModelForm):
    password1 = forms.CharField(label="Clave", widget=forms.PasswordInput, strip=False)
    password2 = forms.CharField(label="Confirmar clave", widget=forms.PasswordInput, strip=False)

    class Meta:
        model = UserProfile
        fields = ["email", "full_name", "role", "is_active", "is_staff"]

    def clean_password2(self) -> str:
        password1 = self.cleaned_data.get("password1")
        password2 = self.cleaned_data.get("password2")
        if password1 and password2 and password1 != password2:
            raise forms.ValidationError("Las claves no coinciden.")
        is_valid, message = AuthService.validate_password(password2)
        if not is_valid:
            raise forms.ValidationError(message)
        return password2

    def save(self, commit: bool = True) -> UserProfile:
        user = super().save(commit=False)
        user.set_password(self.cleaned_data["password1"])
        if commit:
            user.save()
        return user


class UserChangeForm(forms.ModelForm):
    password = ReadOnlyPasswordHashField(label="Clave")

    class Meta:
        model = UserProfile
        fields = ["email", "full_name", "role", "password", "is_active", "is_staff", "is_superuser"]


@admin.action(description="Activar usuarios seleccionados")
def activar_usuarios(modeladmin, request, queryset):
    actualizados = queryset.update(is_active=True)
    messages.success(request, f"{actualizados} usuarios activados.")


@admin.action(description="Desactivar usuarios seleccionados")
def desactivar_usuarios(modeladmin, request, queryset):
    actualizados = queryset.update(is_active=False)
    messages.success(request, f"{actualizados} usuarios desactivados.")


@admin.register(UserProfile)
class UserProfileAdmin(UserAdmin):
    add_form = UserCreationForm
    form = UserChangeForm
    model = UserProfile

    list_display = ("email", "full_name", "role", "is_active", "is_staff")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("email", "full_name")
    ordering = ("full_name", "email")

    fieldsets = (
        (_("Credenciales"), {"fields": ("email", "password")}),
        (_("Informacion personal"), {"fields": ("full_name",)}),
        (_("Roles y permisos"), {"fields": ("role", "groups", "is_active", "is_staff", "is_superuser")}),
        (_("Fechas"), {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "full_name", "role", "is_active", "is_staff", "password1", "password2"),
            },
        ),
    )

    filter_horizontal = ("groups", "user_permissions")
    readonly_fields = ("last_login", "date_joined")
    actions = (activar_usuarios, desactivar_usuarios)
