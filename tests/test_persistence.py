"""Tests for per-instance settings persistence."""

from __future__ import annotations

import json

import pytest

from charting.chart_types import apply_chart_type
from charting.datasets import add_dataset
from charting.model import ViewState
from editor.persistence import (
    DatabaseStore,
    MemoryStore,
    SessionStore,
    encode_snapshot,
    load_snapshot,
    restored_view_state,
    save_snapshot,
    settings_key,
    store_for_request,
)


class FailingStore:
    """A store whose backend is unavailable."""

    def get(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


@pytest.mark.unit
def test_settings_key_uses_namespace(settings) -> None:
    """Keys follow `<namespace>-<kind>-<instanceId>`."""

    assert settings_key("abc") == "chartBuilder-settings-abc"
    settings.CHART_BUILDER_STORAGE_NAMESPACE = "embedded"
    assert settings_key("abc", kind="draft") == "embedded-draft-abc"


@pytest.mark.unit
def test_save_then_load_restores_everything(model, rng, memory_store) -> None:
    """A saved snapshot restores the model, view state and widget values."""

    add_dataset(model, rng=rng)
    apply_chart_type(model, "multiAxis")
    view_state = ViewState(editor_visible=False, active_tab="layout")

    assert save_snapshot(memory_store, "abc", model, view_state, {"chart_type": "multiAxis", "border_width": 4})
    snapshot = load_snapshot(memory_store, "abc")

    assert snapshot is not None
    assert snapshot.labels == model.labels
    assert snapshot.datasets == model.datasets
    assert snapshot.options == model.options
    assert snapshot.view_state == view_state
    assert snapshot.widgets == {"chart_type": "multiAxis", "border_width": 4}


@pytest.mark.unit
def test_instances_are_isolated(model, memory_store) -> None:
    """Snapshots are keyed by instance id."""

    model.chart_title = "First"
    save_snapshot(memory_store, "first", model, ViewState())

    assert load_snapshot(memory_store, "second") is None
    assert load_snapshot(memory_store, "first").options.title.text == "First"


@pytest.mark.unit
@pytest.mark.parametrize("text", ["{not json", "[]", '{"labels": 3, "datasets": [], "options": {}}'])
def test_corrupted_snapshot_reads_as_missing(memory_store, text) -> None:
    """Malformed stored values are discarded."""

    memory_store.set(settings_key("abc"), text)
    assert load_snapshot(memory_store, "abc") is None


@pytest.mark.unit
@pytest.mark.parametrize(("dash", "expected"), [({}, "solid"), ([5, 5], "dashed"), (["x"], "solid")])
def test_snapshot_with_odd_dash_pattern_still_loads(model, memory_store, dash, expected) -> None:
    """A stored dash pattern of the wrong type falls back instead of raising."""

    payload = json.loads(encode_snapshot(model, ViewState()))
    payload["datasets"][0]["dashPattern"] = dash
    memory_store.set(settings_key("abc"), json.dumps(payload))

    snapshot = load_snapshot(memory_store, "abc")

    assert snapshot is not None
    assert snapshot.datasets[0].dash_pattern == expected


@pytest.mark.unit
def test_snapshot_type_errors_read_as_missing(model, memory_store, monkeypatch) -> None:
    """Any decode failure, not only a bad shape, discards the snapshot."""

    def broken_decode(value):
        raise TypeError("unhashable type: 'dict'")

    save_snapshot(memory_store, "abc", model, ViewState())
    monkeypatch.setattr("editor.persistence.decode_datasets", broken_decode)

    assert load_snapshot(memory_store, "abc") is None


@pytest.mark.unit
def test_snapshot_values_are_clamped_on_load(model, memory_store) -> None:
    """Stored values the editor controls cannot show are clamped or dropped."""

    payload = json.loads(encode_snapshot(model, ViewState(), {"chart_type": "bogus", "border_width": 40}))
    payload["datasets"][0]["lineWidth"] = 25
    payload["options"]["font"]["titleSize"] = 40
    memory_store.set(settings_key("abc"), json.dumps(payload))

    snapshot = load_snapshot(memory_store, "abc")

    assert snapshot is not None
    assert snapshot.datasets[0].line_width == 10
    assert snapshot.options.font.title_size == 32
    assert snapshot.widgets == {"border_width": 10}


@pytest.mark.unit
def test_store_failures_do_not_raise(model) -> None:
    """Failing stores skip the save and read as empty."""

    store = FailingStore()
    assert save_snapshot(store, "abc", model, ViewState()) is False
    assert load_snapshot(store, "abc") is None


@pytest.mark.unit
def test_new_instances_open_in_edit_mode() -> None:
    """Without a snapshot the editor is visible on the data tab."""

    assert restored_view_state(None) == ViewState(editor_visible=True, active_tab="data")


@pytest.mark.unit
def test_store_selection_follows_settings(settings, rf) -> None:
    """`CHART_BUILDER_STORE` selects the session or database store."""

    request = rf.get("/")
    request.session = {}

    assert isinstance(store_for_request(request), SessionStore)
    settings.CHART_BUILDER_STORE = "database"
    assert isinstance(store_for_request(request), DatabaseStore)
    assert not isinstance(store_for_request(request), MemoryStore)


@pytest.mark.integration
@pytest.mark.django_db
def test_database_store_round_trip(model) -> None:
    """The database store upserts one row per key."""

    from editor.models import StoredSetting

    store = DatabaseStore()
    model.chart_title = "Stored"
    assert save_snapshot(store, "db-chart", model, ViewState())
    model.chart_title = "Stored again"
    assert save_snapshot(store, "db-chart", model, ViewState())

    assert StoredSetting.objects.count() == 1
    assert load_snapshot(store, "db-chart").options.title.text == "Stored again"
    assert str(StoredSetting.objects.get()) == "StoredSetting(chartBuilder-settings-db-chart)"
