from __future__ import annotations

from django.contrib import admin

from .models import Measurement


@admin.register(Measurement)
class MeasurementAdmin(admin.ModelAdmin):
    list_display = ("client", "kind", "label", "taken_at", "active", "has_extreme_changes")
    list_filter = ("kind", "active", "has_extreme_changes")
    search_fields = ("label", "client__name", "client__phone")
    autocomplete_fields = ("client",)
    readonly_fields = ("detected_changes",)
