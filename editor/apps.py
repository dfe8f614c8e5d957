"""App configuration for the chart editor Django app."""

from __future__ import annotations

from django.apps import AppConfig


class EditorConfig(AppConfig):
    """Configuration for the `editor` app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "editor"
    verbose_name = "Chart editor"
