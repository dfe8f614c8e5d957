"""Database models for the chart editor."""

from __future__ import annotations

from django.db import models


class StoredSetting(models.Model):
    """A durable key -> JSON text entry backing the database settings store.

    Keys follow `<namespace>-<kind>-<instanceId>`; values are opaque JSON text
    written by `editor.persistence`.
    """

    key = models.CharField(max_length=255, unique=True)
    value = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:
        """Return a concise display string."""

        return f"StoredSetting({self.key})"
