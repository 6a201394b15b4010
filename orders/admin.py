from __future__ import annotations

from django.contrib import admin

from .models import Order, OrderItem

# State, cost and deletion changes go through OrderService so its guards apply.
GUARDED_FIELDS = (
    "state",
    "total_cost",
    "pending_balance",
    "last_contact_at",
    "deleted",
    "deletion_reason",
    "deletion_date",
    "deleted_by",
)


def _is_locked(order: Order | None) -> bool:
    return order is not None and (order.deleted or order.is_delivered)


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    autocomplete_fields = ("measurement",)

    def has_add_permission(self, request, obj=None) -> bool:
        return not _is_locked(obj) and super().has_add_permission(request, obj)

    def has_change_permission(self, request, obj=None) -> bool:
        return not _is_locked(obj) and super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None) -> bool:
        return not _is_locked(obj) and super().has_delete_permission(request, obj)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "client",
        "service_type",
        "state",
        "group_name",
        "total_cost",
        "pending_balance",
        "promised_date",
        "deleted",
    )
    list_filter = ("state", "service_type", "deleted")
    search_fields = ("=id", "group_name", "client__name", "client__phone")
    autocomplete_fields = ("client",)
    readonly_fields = GUARDED_FIELDS + ("group_id", "created_at", "updated_at")
    date_hierarchy = "promised_date"
    inlines = (OrderItemInline,)

    def get_readonly_fields(self, request, obj=None):
        if _is_locked(obj):
            return [field.name for field in obj._meta.fields]
        return self.readonly_fields

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
