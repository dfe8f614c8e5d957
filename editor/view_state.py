"""Tab and visibility state for an editor instance.

All tab panels are always rendered; switching tabs only changes which panel is
shown, so it never requires re-binding form controls. Hiding the editor swaps
the tabbed UI for the compact chart-only view, which changes the render target.
"""

from __future__ import annotations

from charting.model import ViewState
from charting.palettes import TAB_CHOICES, choice_values

TABS = choice_values(TAB_CHOICES)
PREVIEW_SURFACE = "chart-preview"
DISPLAY_SURFACE = "chart-display"


def switch_tab(state: ViewState, tab: str) -> ViewState:
    """Activate `tab`.

    Raises:
        ValueError: When `tab` is not a known editor tab.
    """

    if tab not in TABS:
        raise ValueError(f"Unknown editor tab: {tab!r}.")
    state.active_tab = tab
    return state


def show_editor(state: ViewState) -> ViewState:
    """Switch to the tabbed editor view."""

    state.editor_visible = True
    return state


def hide_editor(state: ViewState) -> ViewState:
    """Switch to the chart-only view."""

    state.editor_visible = False
    return state


def visible_surfaces(state: ViewState) -> frozenset[str]:
    """Return the render targets that exist for the current view."""

    if state.editor_visible:
        return frozenset({PREVIEW_SURFACE})
    return frozenset({DISPLAY_SURFACE})


def primary_surface(state: ViewState) -> str:
    """Return the surface the chart is drawn on for the current view."""

    return PREVIEW_SURFACE if state.editor_visible else DISPLAY_SURFACE


def panel_classes(state: ViewState) -> dict[str, bool]:
    """Return `{tab: is_active}` for every editor tab, in display order."""

    return {value: value == state.active_tab for value, _label in TAB_CHOICES}
