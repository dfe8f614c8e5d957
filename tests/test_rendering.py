"""Tests for the render bridge and library loading."""

from __future__ import annotations

import threading

import pytest

from editor.rendering import ChartJsHandle, LibraryLoadError, RenderBridge, load_library, reset_library
from editor.view_state import DISPLAY_SURFACE, PREVIEW_SURFACE

pytestmark = pytest.mark.unit


def test_render_keeps_a_single_live_chart(model, recording_library) -> None:
    """Each render disposes the previous chart first."""

    bridge = RenderBridge(recording_library)
    first = bridge.render(PREVIEW_SURFACE, model, available_targets={PREVIEW_SURFACE})
    second = bridge.render(PREVIEW_SURFACE, model, available_targets={PREVIEW_SURFACE})

    assert first.disposed is True
    assert second.disposed is False
    assert bridge.handle is second
    assert [handle.disposed for handle in recording_library.created].count(False) == 1


def test_render_on_missing_target_is_noop(model, recording_library) -> None:
    """Rendering before the surface exists creates nothing."""

    bridge = RenderBridge(recording_library)

    assert bridge.render(DISPLAY_SURFACE, model, available_targets={PREVIEW_SURFACE}) is None
    assert recording_library.created == []
    assert bridge.update() is False


def test_update_picks_up_model_edits(model, recording_library) -> None:
    """Live updates rebuild the payload from the model."""

    bridge = RenderBridge(recording_library)
    handle = bridge.render(PREVIEW_SURFACE, model, available_targets={PREVIEW_SURFACE})
    model.chart_title = "Updated"

    assert bridge.update() is True
    assert handle.version == 1
    assert handle.payload["options"]["plugins"]["title"]["text"] == "Updated"


def test_disposed_handle_rejects_updates(model) -> None:
    """A disposed chart cannot be updated."""

    handle = ChartJsHandle(target=PREVIEW_SURFACE, config=model)
    handle.dispose()
    with pytest.raises(RuntimeError):
        handle.update()


def test_load_library_is_single_flight() -> None:
    """Concurrent loaders all receive the same library instance."""

    results = []

    def load() -> None:
        results.append(load_library())

    threads = [threading.Thread(target=load) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert all(library is results[0] for library in results)


def test_load_failure_is_cached(settings) -> None:
    """A failed load is reported to every later caller until reset."""

    settings.CHART_BUILDER_RENDERER = "editor.rendering.MissingLibrary"
    with pytest.raises(LibraryLoadError):
        load_library()

    settings.CHART_BUILDER_RENDERER = "editor.rendering.ChartJsLibrary"
    with pytest.raises(LibraryLoadError):
        load_library()

    reset_library()
    assert load_library() is not None
