"""Instance identity used to namespace persisted editor settings.

An explicit id is always preferred. Without one, the id is derived from where
the editor sits on its page (parent + position) and when it was created. The
derived id is stable across save/reload of the same mounted instance but NOT
across remounts that move the editor to a different position; pass an explicit
id when settings must survive layout changes.
"""

from __future__ import annotations

from datetime import datetime

from django.utils.text import slugify

MAX_INSTANCE_ID_LENGTH = 120


def derive_instance_id(
    explicit: str | None,
    *,
    position: int,
    parent: str,
    created_at: datetime,
) -> str:
    """Return the instance id for an editor.

    Args:
        explicit: Explicit id supplied by the host page, if any.
        position: Index of the editor among its siblings.
        parent: Identifier of the containing element (path or element id).
        created_at: Creation timestamp of the instance.

    Returns:
        A non-empty, URL-safe instance id.
    """

    if explicit is not None and explicit.strip():
        return clean_instance_id(explicit)
    created_ms = int(created_at.timestamp() * 1000)
    parent_slug = slugify(parent) or "root"
    return f"{parent_slug}-{position}-{created_ms}"[:MAX_INSTANCE_ID_LENGTH]


def clean_instance_id(value: str) -> str:
    """Normalize an explicit instance id to a URL-safe slug."""

    cleaned = slugify(value.strip()) or "default"
    return cleaned[:MAX_INSTANCE_ID_LENGTH]
