from __future__ import annotations

from django.contrib import admin, messages

from .models import Client


@admin.action(description="Reactivar clientes seleccionados")
def reactivar_clientes(modeladmin, request, queryset):
    actualizados = queryset.update(active=True)
    messages.success(request, f"{actualizados} clientes reactivados.")


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "historical_debt", "active", "registration_date")
    list_filter = ("active",)
    search_fields = ("name", "phone")
    ordering = ("name",)
    readonly_fields = ("registration_date", "updated_at")
    actions = (reactivar_clientes,)

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
