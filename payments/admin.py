from __future__ import annotations

from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "amount", "concept", "method", "paid_at", "registered_by")
    list_filter = ("concept", "method")
    search_fields = ("=order__id", "order__client__name", "notes")
    autocomplete_fields = ("order",)
    readonly_fields = ("registered_by", "created_at", "updated_at")
    date_hierarchy = "paid_at"

    def save_model(self, request, obj, form, change):
        if not change and obj.registered_by_id is None:
            obj.registered_by = request.user
        super().save_model(request, obj, form, change)
