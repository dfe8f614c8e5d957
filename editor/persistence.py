"""Per-instance persistence of editor settings.

A snapshot is a superset of the export document: it also carries the view
state and the widget-only values (chart-type select, border-width slider) that
are not part of the model. Snapshots live in a key -> JSON text store under
`<namespace>-<kind>-<instanceId>`.

Restoring is two-phase. Model fields are applied before the editor forms are
built so the first render reflects them; widget values can only be applied to
forms that already exist, so they are handed back for the caller to apply
after rendering.

Store failures (quota, access, database errors) never interrupt the user: they
are logged and treated as "nothing saved" / "save skipped".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, cast

from django.conf import settings
from django.contrib.sessions.backends.base import SessionBase
from django.http import HttpRequest

from charting.exchange import DocumentError, decode_datasets, decode_labels, decode_options, encode_dataset, encode_options
from charting.model import ChartModel, ChartOptions, Dataset, ViewState
from charting.palettes import (
    CHART_TYPE_CHOICES,
    LINE_WIDTH_RANGE,
    TAB_CHOICES,
    choice_values,
    clamp,
    normalize_chart_type,
)

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
SETTINGS_KIND = "settings"
DEFAULT_NAMESPACE = "chartBuilder"
_TABS = choice_values(TAB_CHOICES)
_CHART_TYPES = choice_values(CHART_TYPE_CHOICES)


class SettingsStore(Protocol):
    """A durable key -> string map. Both operations may raise."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store used for embedding and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class SessionStore:
    """Store scoped to the visitor's browser session."""

    def __init__(self, session: SessionBase) -> None:
        self.session = session

    def get(self, key: str) -> str | None:
        value = self.session.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.session[key] = value


class DatabaseStore:
    """Store backed by the `StoredSetting` table."""

    def get(self, key: str) -> str | None:
        from editor.models import StoredSetting

        row = StoredSetting.objects.filter(key=key).only("value").first()
        return row.value if row is not None else None

    def set(self, key: str, value: str) -> None:
        from editor.models import StoredSetting

        StoredSetting.objects.update_or_create(key=key, defaults={"value": value})


def store_for_request(request: HttpRequest) -> SettingsStore:
    """Return the configured settings store for a request.

    `CHART_BUILDER_STORE` selects `session` (default) or `database`.
    """

    backend = getattr(settings, "CHART_BUILDER_STORE", "session")
    if backend == "database":
        return DatabaseStore()
    return SessionStore(request.session)


def settings_key(instance_id: str, *, kind: str = SETTINGS_KIND) -> str:
    """Return the store key for an instance (`<namespace>-<kind>-<instanceId>`)."""

    namespace = getattr(settings, "CHART_BUILDER_STORAGE_NAMESPACE", DEFAULT_NAMESPACE)
    return f"{namespace}-{kind}-{instance_id}"


@dataclass(slots=True)
class Snapshot:
    """Everything persisted for one editor instance."""

    view_state: ViewState
    labels: list[str]
    datasets: list[Dataset]
    options: ChartOptions
    widgets: dict[str, Any] = field(default_factory=dict)


def encode_snapshot(model: ChartModel, view_state: ViewState, widgets: dict[str, Any] | None = None) -> str:
    """Serialize model, view state and widget values to JSON text."""

    payload = {
        "version": SNAPSHOT_VERSION,
        "editorVisible": view_state.editor_visible,
        "activeTab": view_state.active_tab,
        "labels": list(model.labels),
        "datasets": [encode_dataset(dataset) for dataset in model.datasets],
        "options": encode_options(model.options),
        "widgets": dict(widgets or {}),
    }
    return json.dumps(payload)


def decode_snapshot(text: str) -> Snapshot:
    """Parse snapshot JSON text.

    Raises:
        ValueError: When the text is not a well-formed snapshot.
    """

    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("Snapshot must be a JSON object.")
    raw = cast(dict[str, Any], payload)
    try:
        labels = decode_labels(raw.get("labels"))
        datasets = decode_datasets(raw.get("datasets"))
        options = decode_options(raw.get("options"))
    except (DocumentError, TypeError) as exc:
        raise ValueError(str(exc)) from exc
    active_tab = str(raw.get("activeTab") or "data")
    return Snapshot(
        view_state=ViewState(
            editor_visible=bool(raw.get("editorVisible", True)),
            active_tab=active_tab if active_tab in _TABS else "data",
        ),
        labels=labels,
        datasets=datasets,
        options=options,
        widgets=decode_widgets(raw.get("widgets")),
    )


def decode_widgets(value: object) -> dict[str, Any]:
    """Keep the stored widget values the editor controls can still display."""

    if not isinstance(value, dict):
        return {}
    widgets: dict[str, Any] = {}
    chart_type = value.get("chart_type")
    if isinstance(chart_type, str) and normalize_chart_type(chart_type) in _CHART_TYPES:
        widgets["chart_type"] = normalize_chart_type(chart_type)
    border_width = value.get("border_width")
    if isinstance(border_width, int) and not isinstance(border_width, bool):
        widgets["border_width"] = clamp(border_width, LINE_WIDTH_RANGE)
    return widgets


def save_snapshot(
    store: SettingsStore,
    instance_id: str,
    model: ChartModel,
    view_state: ViewState,
    widgets: dict[str, Any] | None = None,
) -> bool:
    """Persist a snapshot for `instance_id`.

    Returns:
        True when the store accepted the write, False when it failed.
    """

    key = settings_key(instance_id)
    try:
        store.set(key, encode_snapshot(model, view_state, widgets))
    except Exception:
        logger.warning("Could not save chart settings under %s; save skipped.", key, exc_info=True)
        return False
    return True


def load_snapshot(store: SettingsStore, instance_id: str) -> Snapshot | None:
    """Return the last snapshot saved for `instance_id`, if any.

    Absent, unreadable and malformed entries all read as None.
    """

    key = settings_key(instance_id)
    try:
        text = store.get(key)
    except Exception:
        logger.warning("Could not read chart settings under %s; using defaults.", key, exc_info=True)
        return None
    if text is None:
        return None
    try:
        return decode_snapshot(text)
    except ValueError as exc:
        logger.warning("Discarding malformed chart settings under %s: %s", key, exc)
        return None


def apply_model_fields(snapshot: Snapshot, model: ChartModel) -> None:
    """Phase one of a restore: copy model-level fields into `model`."""

    model.labels = list(snapshot.labels)
    model.datasets = list(snapshot.datasets)
    model.options = snapshot.options


def restored_view_state(snapshot: Snapshot | None) -> ViewState:
    """Return the view state to start with.

    New instances (no snapshot) open in edit mode; otherwise the saved
    visibility and tab are restored.
    """

    if snapshot is None:
        return ViewState(editor_visible=True, active_tab="data")
    return ViewState(
        editor_visible=snapshot.view_state.editor_visible,
        active_tab=snapshot.view_state.active_tab,
    )
