"""Admin registrations for the chart editor app."""

from __future__ import annotations

from django.contrib import admin

from editor.models import StoredSetting


@admin.register(StoredSetting)
class StoredSettingAdmin(admin.ModelAdmin):
    """Admin configuration for persisted editor settings."""

    list_display = ("key", "updated_at")
    search_fields = ("key",)
    readonly_fields = ("updated_at",)
