"""One mounted chart editor instance.

`EditorSession` ties the model, view state, bindings, forms, persistence and
render bridge together. Every handler runs to completion before the next one,
so there is no locking; the only deferred work is the phase-two application of
restored widget values, which is queued until the forms have been built.

Structural changes (adding/removing datasets, chart-type transforms, imports,
restores) always end in `rebind()`, which rebuilds the binding registry and the
forms from the model.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import Any

from charting.chart_types import apply_chart_type
from charting.datasets import add_dataset, remove_dataset, set_line_width_for_all
from charting.exchange import export_filename, export_json, import_model
from charting.model import ChartModel, ViewState, default_model
from charting.palettes import CHART_TYPE_CHOICES, LINE_WIDTH_RANGE, choice_values, clamp, normalize_chart_type

from .bindings import BindingRegistry, CommitResult, apply_palette_color
from .forms import EditorForms
from .persistence import (
    SettingsStore,
    Snapshot,
    apply_model_fields,
    load_snapshot,
    restored_view_state,
    save_snapshot,
)
from .rendering import ChartHandle, RenderBridge, RenderingLibrary
from .view_state import hide_editor, primary_surface, show_editor, switch_tab, visible_surfaces

logger = logging.getLogger(__name__)

DEFAULT_BORDER_WIDTH = 2
_CHART_TYPES = choice_values(CHART_TYPE_CHOICES)


class EditorSession:
    """Controller for a single editor instance.

    Args:
        instance_id: Key namespacing this instance's persisted settings.
        store: Settings store used for save/load.
        library: Loaded rendering library.
        rng: Optional random source for new dataset values.
    """

    def __init__(
        self,
        *,
        instance_id: str,
        store: SettingsStore,
        library: RenderingLibrary,
        rng: random.Random | None = None,
    ) -> None:
        self.instance_id = instance_id
        self.store = store
        self.bridge = RenderBridge(library)
        self.rng = rng
        self.model: ChartModel = default_model()
        self.view_state = ViewState()
        self.widgets: dict[str, Any] = {"chart_type": "basic", "border_width": DEFAULT_BORDER_WIDTH}
        self.registry = BindingRegistry.for_model(self.model)
        self.forms: EditorForms | None = None
        self.mounted = False
        self._after_render: list[Callable[[], None]] = []

    def mount(self) -> "EditorSession":
        """Restore persisted settings, build the forms and draw the chart."""

        snapshot = load_snapshot(self.store, self.instance_id)
        self._restore(snapshot)
        self.mounted = True
        self.render_chart()
        return self

    def unmount(self) -> None:
        """Release the live chart."""

        self.bridge.dispose()
        self.mounted = False

    def reload(self, instance_id: str) -> None:
        """Switch to another instance id and reload its settings from scratch."""

        self.bridge.dispose()
        self.instance_id = instance_id
        self.model = default_model()
        self.widgets = {"chart_type": "basic", "border_width": DEFAULT_BORDER_WIDTH}
        self.mount()

    def _restore(self, snapshot: Snapshot | None) -> None:
        self.view_state = restored_view_state(snapshot)
        if snapshot is not None:
            apply_model_fields(snapshot, self.model)
            pending = dict(snapshot.widgets)
            self.schedule_after_render(lambda: self._apply_widgets(pending))
        self.rebind()

    def _apply_widgets(self, values: dict[str, Any]) -> None:
        self.widgets.update(values)
        if self.forms is not None:
            self.forms.apply_widget_values(values)

    def schedule_after_render(self, callback: Callable[[], None]) -> None:
        """Queue `callback` to run once the forms have been (re)built."""

        self._after_render.append(callback)

    def rebind(self, data: Any = None) -> EditorForms:
        """Rebuild bindings and forms from the model, then run deferred work."""

        self.registry = BindingRegistry.for_model(self.model)
        self.forms = EditorForms.build(model=self.model, registry=self.registry, widgets=self.widgets, data=data)
        pending, self._after_render = self._after_render, []
        for callback in pending:
            callback()
        return self.forms

    def mounted_forms(self) -> EditorForms:
        """Return the editor forms built by `mount()`.

        Raises:
            RuntimeError: When the session has not been mounted yet.
        """

        if self.forms is None:
            raise RuntimeError(f"Editor session {self.instance_id!r} has not been mounted.")
        return self.forms

    def render_chart(self) -> ChartHandle | None:
        """Draw the chart on whichever surface the current view shows."""

        return self.bridge.render(
            primary_surface(self.view_state),
            self.model,
            available_targets=visible_surfaces(self.view_state),
        )

    def commit(self, control: str, raw: Any, *, event: str) -> CommitResult:
        """Commit one control event.

        Widget controls run their command (chart type, border width); bound
        controls write one model field.

        Raises:
            KeyError: When `control` is neither a widget nor a bound control.
        """

        if control == "chart_type":
            if event != "change":
                return CommitResult(control=control, applied=False)
            try:
                self.apply_chart_type(str(raw))
            except ValueError:
                logger.warning("Ignoring unknown chart type: %r", raw)
                return CommitResult(control=control, applied=False)
            return CommitResult(control=control, applied=True, value=self.widgets["chart_type"])
        if control == "border_width":
            if event != "input":
                return CommitResult(control=control, applied=False)
            try:
                width = int(float(str(raw)))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Ignoring unparseable border width: %r", raw)
                return CommitResult(control=control, applied=False)
            width = self.set_border_width(width)
            return CommitResult(control=control, applied=True, value=width, readout=str(width))
        return self.registry.commit(self.model, control, raw, event=event)  # type: ignore[arg-type]

    def submit(self, data: Any) -> list[str]:
        """Commit a full editor form submission.

        Returns:
            Validation error messages for fields that were not committed.
        """

        submitted = EditorForms.build(model=self.model, registry=self.registry, widgets=self.widgets, data=data)
        submitted.commit_submitted(model=self.model, registry=self.registry)
        errors = submitted.errors()
        layout = submitted.layout
        if "border_width" in layout.changed_data and layout.cleaned_data.get("border_width"):
            self.set_border_width(int(layout.cleaned_data["border_width"]))
        options = submitted.options
        if "chart_type" in options.changed_data and options.cleaned_data.get("chart_type"):
            self.apply_chart_type(str(options.cleaned_data["chart_type"]))
        self.rebind()
        return errors

    def add_dataset(self) -> int:
        """Append a dataset and regenerate the dataset controls."""

        index = add_dataset(self.model, rng=self.rng)
        self.rebind()
        return index

    def remove_dataset(self, index: int) -> bool:
        """Remove a dataset (no-op for the last one) and regenerate controls."""

        removed = remove_dataset(self.model, index)
        if removed:
            self.rebind()
        return removed

    def apply_chart_type(self, chart_type: str) -> None:
        """Run a chart-type transform and regenerate controls."""

        self.widgets["chart_type"] = apply_chart_type(self.model, chart_type)
        self.rebind()

    def apply_palette_color(self, color: str, *, selected_index: int | None = None) -> int:
        """Apply a palette swatch to the selected (or first) dataset."""

        index = apply_palette_color(self.model, color, selected_index=selected_index)
        self.rebind()
        return index

    def set_border_width(self, width: int) -> int:
        """Apply the layout border width to every dataset.

        Returns:
            The width actually applied, clamped to the line-width range.
        """

        width = clamp(int(width), LINE_WIDTH_RANGE)
        self.widgets["border_width"] = width
        set_line_width_for_all(self.model, width)
        self.rebind()
        return width

    def set_title(self, title: str) -> None:
        """Set the chart title and push it to an already-rendered chart."""

        self.model.chart_title = title
        self.rebind()
        self.bridge.update()

    def switch_tab(self, tab: str) -> None:
        """Show another editor tab (controls stay bound)."""

        switch_tab(self.view_state, tab)

    def show_editor(self) -> None:
        """Switch to the tabbed editor and redraw on the preview surface."""

        show_editor(self.view_state)
        self.rebind()
        self.render_chart()

    def hide_editor(self) -> None:
        """Switch to the chart-only view and redraw on the display surface."""

        hide_editor(self.view_state)
        self.render_chart()

    def update_chart(self) -> ChartHandle | None:
        """Redraw the chart from the model and show the preview tab."""

        handle = self.render_chart()
        switch_tab(self.view_state, "preview")
        return handle

    def save(self) -> bool:
        """Persist the model, view state and widget values."""

        return save_snapshot(self.store, self.instance_id, self.model, self.view_state, self.widgets)

    def export(self) -> tuple[str, str]:
        """Return `(filename, json_text)` for a settings download."""

        return export_filename(self.instance_id), export_json(self.model, chart_type=self.widgets.get("chart_type"))

    def import_document(self, document: dict[str, Any] | None) -> bool:
        """Merge an exported document, then re-render and re-bind everything.

        Returns:
            False (and an untouched model) when the document is unusable.
        """

        if not import_model(document, self.model):
            return False
        chart_type = (document or {}).get("chartType")
        if isinstance(chart_type, str) and normalize_chart_type(chart_type) in _CHART_TYPES:
            self.widgets["chart_type"] = normalize_chart_type(chart_type)
        self.rebind()
        handle = self.render_chart()
        if handle is not None:
            handle.update()
        return True

    def attribute_changed(self, name: str, old: str | None, new: str | None) -> None:
        """React to a host attribute change.

        `chart-type` applies the transform, `chart-title` retitles the chart and
        pushes a live update, `instance-id` reloads that instance's settings.
        """

        if old == new or new is None:
            return
        if name == "chart-type":
            self.apply_chart_type(new)
        elif name == "chart-title":
            self.set_title(new)
        elif name == "instance-id":
            self.reload(new)
