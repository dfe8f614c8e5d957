"""URL configuration for the chart editor."""

from __future__ import annotations

from django.urls import path

from editor import views

app_name = "editor"

urlpatterns = [
    path("", views.index, name="index"),
    path("charts/<slug:instance_id>/", views.chart_editor, name="editor"),
    path("charts/<slug:instance_id>/commit/", views.commit_control, name="commit"),
    path("charts/<slug:instance_id>/export/", views.export_settings, name="export"),
]
