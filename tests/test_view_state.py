"""Tests for editor tab and visibility state."""

from __future__ import annotations

import pytest

from charting.model import ViewState
from editor.view_state import (
    DISPLAY_SURFACE,
    PREVIEW_SURFACE,
    hide_editor,
    panel_classes,
    primary_surface,
    show_editor,
    switch_tab,
    visible_surfaces,
)

pytestmark = pytest.mark.unit


def test_switch_tab_activates_exactly_one_panel() -> None:
    """Only the chosen panel is marked active."""

    state = switch_tab(ViewState(), "layout")

    assert panel_classes(state) == {"data": False, "options": False, "layout": True, "preview": False}


def test_switch_tab_rejects_unknown_tab() -> None:
    """Unknown tabs raise and keep the current tab."""

    state = ViewState()
    with pytest.raises(ValueError):
        switch_tab(state, "settings")
    assert state.active_tab == "data"


def test_visibility_changes_render_surface() -> None:
    """Hiding the editor swaps the preview surface for the display surface."""

    state = ViewState()
    assert primary_surface(state) == PREVIEW_SURFACE
    assert visible_surfaces(state) == {PREVIEW_SURFACE}

    hide_editor(state)
    assert primary_surface(state) == DISPLAY_SURFACE
    assert PREVIEW_SURFACE not in visible_surfaces(state)

    show_editor(state)
    assert state.editor_visible is True
