"""Forms for the chart editor tabs.

Each tab is a plain Django form whose field names are the control names of
`editor.bindings`. Forms are always built with `initial` data from
`BindingRegistry.hydrate`, and submitted values are committed back through the
same bindings, so the model stays the single source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from django import forms

from charting.model import ChartModel
from charting.palettes import (
    AXIS_FONT_SIZE_RANGE,
    CHART_TYPE_CHOICES,
    DASH_PATTERN_CHOICES,
    FILL_MODE_CHOICES,
    FONT_FAMILIES,
    GRID_LINE_CHOICES,
    LEGEND_POSITION_CHOICES,
    LINE_WIDTH_RANGE,
    POINT_RADIUS_RANGE,
    POINT_STYLE_CHOICES,
    TITLE_FONT_SIZE_RANGE,
)

from .bindings import DATASET_PREFIX, BindingRegistry, CommitResult, dataset_control


MAX_IMPORT_BYTES = 1_000_000


class ChartDataForm(forms.Form):
    """Shared labels for every dataset (Data tab)."""

    chart_labels = forms.CharField(
        required=False,
        label="Chart Labels (comma separated)",
        widget=forms.TextInput(attrs={"class": "form-control", "data-commit": "change"}),
    )


class ChartOptionsForm(forms.Form):
    """Chart-wide options (Chart Options tab)."""

    chart_type = forms.ChoiceField(
        required=False,
        choices=CHART_TYPE_CHOICES,
        label="Chart Type",
        help_text="Applies a one-shot style change to every dataset.",
        widget=forms.Select(attrs={"class": "form-control", "data-commit": "change"}),
    )
    chart_title = forms.CharField(
        required=False,
        label="Chart Title",
        widget=forms.TextInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    show_title = forms.BooleanField(
        required=False,
        label="Show Title",
        widget=forms.CheckboxInput(attrs={"data-commit": "change"}),
    )
    x_axis_title = forms.CharField(
        required=False,
        label="X-Axis Title",
        widget=forms.TextInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    y_axis_title = forms.CharField(
        required=False,
        label="Y-Axis Title",
        widget=forms.TextInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    secondary_axis_title = forms.CharField(
        required=False,
        label="Secondary Y-Axis Title",
        widget=forms.TextInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    show_legend = forms.BooleanField(
        required=False,
        label="Show Legend",
        widget=forms.CheckboxInput(attrs={"data-commit": "change"}),
    )
    legend_position = forms.ChoiceField(
        required=False,
        choices=LEGEND_POSITION_CHOICES,
        label="Legend Position",
        widget=forms.Select(attrs={"class": "form-control", "data-commit": "change"}),
    )
    enable_animation = forms.BooleanField(
        required=False,
        label="Enable Animation",
        widget=forms.CheckboxInput(attrs={"data-commit": "change"}),
    )
    enable_tooltips = forms.BooleanField(
        required=False,
        label="Enable Tooltips",
        widget=forms.CheckboxInput(attrs={"data-commit": "change"}),
    )
    maintain_aspect_ratio = forms.BooleanField(
        required=False,
        label="Maintain Aspect Ratio",
        widget=forms.CheckboxInput(attrs={"data-commit": "change"}),
    )

    def __init__(self, *args, **kwargs) -> None:
        """Drop the secondary axis control unless the model has that axis."""

        has_secondary_axis = bool(kwargs.pop("has_secondary_axis", False))
        super().__init__(*args, **kwargs)
        if not has_secondary_axis:
            del self.fields["secondary_axis_title"]


class ChartLayoutForm(forms.Form):
    """Fonts, grid and colors (Layout & Colors tab)."""

    chart_font_family = forms.ChoiceField(
        required=False,
        choices=[(font, font) for font in FONT_FAMILIES],
        label="Chart Font Family",
        widget=forms.Select(attrs={"class": "form-control", "data-commit": "change"}),
    )
    title_font_size = forms.IntegerField(
        required=False,
        min_value=TITLE_FONT_SIZE_RANGE[0],
        max_value=TITLE_FONT_SIZE_RANGE[1],
        label="Title Font Size",
        widget=forms.NumberInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    axis_font_size = forms.IntegerField(
        required=False,
        min_value=AXIS_FONT_SIZE_RANGE[0],
        max_value=AXIS_FONT_SIZE_RANGE[1],
        label="Axis Font Size",
        widget=forms.NumberInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    grid_lines = forms.ChoiceField(
        required=False,
        choices=GRID_LINE_CHOICES,
        label="Grid Lines",
        widget=forms.Select(attrs={"class": "form-control", "data-commit": "change"}),
    )
    chart_background = forms.CharField(
        required=False,
        label="Chart Background",
        widget=forms.TextInput(attrs={"type": "color", "class": "form-control", "data-commit": "change"}),
    )
    enable_rounded_corners = forms.BooleanField(
        required=False,
        label="Round Corners",
        widget=forms.CheckboxInput(attrs={"data-commit": "change"}),
    )
    border_width = forms.IntegerField(
        required=False,
        min_value=LINE_WIDTH_RANGE[0],
        max_value=LINE_WIDTH_RANGE[1],
        label="Border Width",
        help_text="Applies to every dataset.",
        widget=forms.NumberInput(attrs={"type": "range", "class": "form-control", "data-commit": "input"}),
    )


class DatasetForm(forms.Form):
    """Controls for one dataset panel."""

    label = forms.CharField(
        required=False,
        label="Label",
        widget=forms.TextInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    data = forms.CharField(
        required=False,
        label="Data Values (comma separated)",
        widget=forms.TextInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    line_color = forms.CharField(
        required=False,
        label="Line Color",
        widget=forms.TextInput(attrs={"type": "color", "class": "form-control", "data-commit": "change"}),
    )
    fill_color = forms.CharField(
        required=False,
        label="Fill Color",
        widget=forms.TextInput(attrs={"type": "color", "class": "form-control", "data-commit": "change"}),
    )
    line_width = forms.IntegerField(
        required=False,
        min_value=LINE_WIDTH_RANGE[0],
        max_value=LINE_WIDTH_RANGE[1],
        label="Line Width",
        widget=forms.NumberInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    tension = forms.FloatField(
        required=False,
        min_value=0,
        max_value=1,
        label="Line Tension",
        widget=forms.NumberInput(
            attrs={"type": "range", "step": "0.1", "class": "form-control", "data-commit": "input"}
        ),
    )
    point_style = forms.ChoiceField(
        required=False,
        choices=POINT_STYLE_CHOICES,
        label="Point Style",
        widget=forms.Select(attrs={"class": "form-control", "data-commit": "change"}),
    )
    point_radius = forms.IntegerField(
        required=False,
        min_value=POINT_RADIUS_RANGE[0],
        max_value=POINT_RADIUS_RANGE[1],
        label="Point Size",
        widget=forms.NumberInput(attrs={"class": "form-control", "data-commit": "change"}),
    )
    dash_pattern = forms.ChoiceField(
        required=False,
        choices=DASH_PATTERN_CHOICES,
        label="Line Style",
        widget=forms.Select(attrs={"class": "form-control", "data-commit": "change"}),
    )
    fill_mode = forms.ChoiceField(
        required=False,
        choices=FILL_MODE_CHOICES,
        label="Fill Style",
        widget=forms.Select(attrs={"class": "form-control", "data-commit": "change"}),
    )


DatasetFormSet = forms.formset_factory(DatasetForm, extra=0, can_delete=False)


class ImportSettingsForm(forms.Form):
    """Upload a previously exported chart settings document."""

    settings_file = forms.FileField(label="Chart settings (.json)")

    def clean_settings_file(self) -> bytes:
        """Return the uploaded bytes, rejecting oversized files.

        Returns:
            The raw uploaded document.
        """

        uploaded = self.cleaned_data["settings_file"]
        if uploaded.size is not None and uploaded.size > MAX_IMPORT_BYTES:
            raise forms.ValidationError("Chart settings files must be smaller than 1 MB.")
        return uploaded.read()


# Controls that are editor widgets rather than model fields.
WIDGET_CONTROLS: tuple[str, ...] = ("chart_type", "border_width")


@dataclass(slots=True)
class EditorForms:
    """The full set of forms making up one rendered editor."""

    data: ChartDataForm
    options: ChartOptionsForm
    layout: ChartLayoutForm
    datasets: Any
    initial: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        model: ChartModel,
        registry: BindingRegistry,
        widgets: dict[str, Any] | None = None,
        data: Any = None,
    ) -> "EditorForms":
        """Build every editor form hydrated from the model.

        Args:
            model: Model providing initial values.
            registry: Bindings for the model's current structure.
            widgets: Widget-only values (chart type, border width).
            data: Optional submitted data (bound forms).

        Returns:
            EditorForms with all controls hydrated.
        """

        initial = registry.hydrate(model)
        for key, value in (widgets or {}).items():
            if key in WIDGET_CONTROLS:
                initial[key] = value
        dataset_initial = [
            {
                field_name: initial[dataset_control(index, field_name)]
                for field_name in DatasetForm.base_fields
                if dataset_control(index, field_name) in initial
            }
            for index in range(len(model.datasets))
        ]
        return cls(
            data=ChartDataForm(data, initial=initial),
            options=ChartOptionsForm(
                data,
                initial=initial,
                has_secondary_axis=model.options.axes.secondary_y is not None,
            ),
            layout=ChartLayoutForm(data, initial=initial),
            datasets=DatasetFormSet(data, initial=dataset_initial, prefix=DATASET_PREFIX),
            initial=initial,
        )

    def apply_widget_values(self, values: dict[str, Any]) -> None:
        """Apply widget-only values once the forms exist.

        Args:
            values: `{control: value}` for widget controls.
        """

        for key, value in values.items():
            for form in (self.data, self.options, self.layout):
                if key in form.fields:
                    form.initial[key] = value
            self.initial[key] = value

    def commit_submitted(self, *, model: ChartModel, registry: BindingRegistry) -> list[CommitResult]:
        """Commit every valid, changed, bound field of a submitted editor.

        Invalid fields are skipped (and left as they were in the model);
        widget-only fields are not committed here.

        Returns:
            CommitResults for the fields that were committed.
        """

        results: list[CommitResult] = []
        for form in (self.data, self.options, self.layout):
            form.is_valid()
            for name in form.changed_data:
                if name in registry and name in form.cleaned_data:
                    results.append(self._commit(model, registry, name, form.cleaned_data[name]))
        self.datasets.is_valid()
        for index, form in enumerate(self.datasets.forms):
            cleaned = getattr(form, "cleaned_data", {})
            for name in form.changed_data:
                control = dataset_control(index, name)
                if control in registry and name in cleaned:
                    results.append(self._commit(model, registry, control, cleaned[name]))
        return results

    @staticmethod
    def _commit(model: ChartModel, registry: BindingRegistry, control: str, value: Any) -> CommitResult:
        binding = registry.get(control)
        if value is None:
            return CommitResult(control=control, applied=False)
        return registry.commit(model, control, value, event=binding.trigger)

    def errors(self) -> list[str]:
        """Return flattened error messages for bound forms."""

        messages: list[str] = []
        for form in (self.data, self.options, self.layout):
            for name, errors in form.errors.items():
                messages.extend(f"{name}: {error}" for error in errors)
        for index, form in enumerate(self.datasets.forms):
            for name, errors in form.errors.items():
                messages.extend(f"Dataset {index + 1} {name}: {error}" for error in errors)
        return messages
