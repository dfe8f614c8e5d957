"""Control <-> model bindings for the chart editor.

Every editable field of the ChartModel is bound to exactly one form control
through a `(path, codec)` pair. Values move in one direction per event:

- hydration writes model values into controls (initial form data);
- a commit writes one control value into the model.

Dataset controls are keyed by index (`dataset-{i}-{field}`, matching the
dataset formset prefix). After any structural change the registry is simply
rebuilt with `BindingRegistry.for_model`, which is deterministic, so there are
no stale per-control handlers to clean up.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Literal

from charting.colors import fill_from_line, to_hex
from charting.model import ChartModel, GridOptions
from charting.palettes import (
    AXIS_FONT_SIZE_RANGE,
    DASH_PATTERN_CHOICES,
    FILL_MODE_CHOICES,
    FONT_FAMILIES,
    GRID_LINE_CHOICES,
    LEGEND_POSITION_CHOICES,
    LINE_WIDTH_RANGE,
    POINT_RADIUS_RANGE,
    POINT_STYLE_CHOICES,
    TITLE_FONT_SIZE_RANGE,
    choice_values,
    clamp,
    grid_flags,
    grid_lines_value,
)

logger = logging.getLogger(__name__)

ControlEvent = Literal["input", "change"]
Path = tuple[str | int, ...]

DATASET_PREFIX = "dataset"
ANIMATION_DURATION_MS = 1000


@dataclass(frozen=True, slots=True)
class FieldCodec:
    """Convert between a control value and a model value.

    Args:
        parse: Control value -> model value. Raises ValueError on bad input.
        format: Model value -> control value.
    """

    parse: Callable[[Any], Any]
    format: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class Binding:
    """One control bound to one model field.

    Args:
        control: Form control name.
        path: Attribute path into the model (ints index into lists).
        codec: Value converter.
        live: Live controls (ranges) commit on every `input` tick and report a
            read-out; other controls commit on `change`.
        derive: Optional hook that updates fields derived from this one.
    """

    control: str
    path: Path
    codec: FieldCodec
    live: bool = False
    derive: Callable[[ChartModel, Path, Any], None] | None = None

    @property
    def trigger(self) -> ControlEvent:
        """Return the event that commits this control."""

        return "input" if self.live else "change"


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Outcome of committing one control value."""

    control: str
    applied: bool
    value: Any = None
    readout: str | None = None


def parse_number_list(raw: Any) -> list[float]:
    """Parse comma-separated numbers; entries that fail become NaN."""

    values: list[float] = []
    for part in str(raw or "").split(","):
        text = part.strip()
        try:
            values.append(float(text))
        except ValueError:
            values.append(math.nan)
    return values


def format_number_list(values: list[float]) -> str:
    """Format numbers for the comma-separated data control."""

    return ", ".join("NaN" if math.isnan(v) else _format_number(v) for v in values)


def parse_label_list(raw: Any) -> list[str]:
    """Split comma-separated labels and trim each entry."""

    return [part.strip() for part in str(raw or "").split(",")]


def parse_bool(raw: Any) -> bool:
    """Parse a checkbox value from form data or JSON."""

    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().casefold() in {"1", "true", "on", "yes"}


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _int_codec(bounds: tuple[int, int]) -> FieldCodec:
    def parse(raw: Any) -> int:
        return clamp(int(float(str(raw).strip())), bounds)

    return FieldCodec(parse=parse, format=int)


def _unit_float_parse(raw: Any) -> float:
    value = float(str(raw).strip())
    if math.isnan(value):
        raise ValueError("NaN is not a valid tension.")
    return min(1.0, max(0.0, value))


def _choice_codec(allowed: frozenset[str]) -> FieldCodec:
    def parse(raw: Any) -> str:
        value = str(raw)
        if value not in allowed:
            raise ValueError(f"{value!r} is not an allowed choice.")
        return value

    return FieldCodec(parse=parse, format=str)


def _hex_parse(raw: Any) -> str:
    return to_hex(str(raw))


TEXT = FieldCodec(parse=lambda raw: str(raw if raw is not None else ""), format=str)
BOOL = FieldCodec(parse=parse_bool, format=bool)
LABELS = FieldCodec(parse=parse_label_list, format=lambda values: ", ".join(values))
NUMBERS = FieldCodec(parse=parse_number_list, format=format_number_list)
HEX_COLOR = FieldCodec(parse=_hex_parse, format=to_hex)
FILL_COLOR = FieldCodec(parse=lambda raw: fill_from_line(_hex_parse(raw)), format=to_hex)
TENSION = FieldCodec(parse=_unit_float_parse, format=float)
ANIMATION = FieldCodec(
    parse=lambda raw: ANIMATION_DURATION_MS if parse_bool(raw) else 0,
    format=lambda duration: int(duration) > 0,
)
_GRID_LINES = _choice_codec(choice_values(GRID_LINE_CHOICES))
GRID = FieldCodec(
    parse=lambda raw: GridOptions(*grid_flags(_GRID_LINES.parse(raw))),
    format=lambda grid: grid_lines_value(x=grid.x, y=grid.y),
)
FONT_FAMILY = _choice_codec(frozenset(FONT_FAMILIES))
LEGEND_POSITION = _choice_codec(choice_values(LEGEND_POSITION_CHOICES))
POINT_STYLE = _choice_codec(choice_values(POINT_STYLE_CHOICES))
DASH_PATTERN = _choice_codec(choice_values(DASH_PATTERN_CHOICES))
FILL_MODE = _choice_codec(choice_values(FILL_MODE_CHOICES))


def _derive_hover_radius(model: ChartModel, path: Path, radius: int) -> None:
    dataset = model.datasets[int(path[1])]
    dataset.point_hover_radius = radius + 2


STATIC_BINDINGS: tuple[Binding, ...] = (
    Binding("chart_labels", ("labels",), LABELS),
    Binding("chart_title", ("options", "title", "text"), TEXT),
    Binding("show_title", ("options", "title", "displayed"), BOOL),
    Binding("x_axis_title", ("options", "axes", "x", "title"), TEXT),
    Binding("y_axis_title", ("options", "axes", "y", "title"), TEXT),
    Binding("show_legend", ("options", "legend", "displayed"), BOOL),
    Binding("legend_position", ("options", "legend", "position"), LEGEND_POSITION),
    Binding("enable_animation", ("options", "animation", "duration_ms"), ANIMATION),
    Binding("enable_tooltips", ("options", "tooltips", "enabled"), BOOL),
    Binding("maintain_aspect_ratio", ("options", "maintain_aspect_ratio"), BOOL),
    Binding("chart_font_family", ("options", "font", "family"), FONT_FAMILY),
    Binding("title_font_size", ("options", "font", "title_size"), _int_codec(TITLE_FONT_SIZE_RANGE)),
    Binding("axis_font_size", ("options", "font", "axis_size"), _int_codec(AXIS_FONT_SIZE_RANGE)),
    Binding("grid_lines", ("options", "grid"), GRID),
    Binding("chart_background", ("options", "background"), HEX_COLOR),
    Binding("enable_rounded_corners", ("options", "rounded_corners"), BOOL),
)

SECONDARY_AXIS_BINDING = Binding("secondary_axis_title", ("options", "axes", "secondary_y", "title"), TEXT)

# (field name, model attribute, codec, live, derive)
DATASET_FIELDS: tuple[tuple[str, str, FieldCodec, bool, Callable[[ChartModel, Path, Any], None] | None], ...] = (
    ("label", "label", TEXT, False, None),
    ("data", "data", NUMBERS, False, None),
    ("line_color", "line_color", HEX_COLOR, False, None),
    ("fill_color", "fill_color", FILL_COLOR, False, None),
    ("line_width", "line_width", _int_codec(LINE_WIDTH_RANGE), False, None),
    ("tension", "tension", TENSION, True, None),
    ("point_style", "point_style", POINT_STYLE, False, None),
    ("point_radius", "point_radius", _int_codec(POINT_RADIUS_RANGE), False, _derive_hover_radius),
    ("dash_pattern", "dash_pattern", DASH_PATTERN, False, None),
    ("fill_mode", "fill_mode", FILL_MODE, False, None),
)


def dataset_control(index: int, field: str) -> str:
    """Return the control name of a dataset field (`dataset-{i}-{field}`)."""

    return f"{DATASET_PREFIX}-{index}-{field}"


class BindingRegistry:
    """The complete control -> binding map for one model shape."""

    def __init__(self, bindings: tuple[Binding, ...]) -> None:
        self._bindings = {binding.control: binding for binding in bindings}

    @classmethod
    def for_model(cls, model: ChartModel) -> "BindingRegistry":
        """Build the registry for the model's current structure.

        Args:
            model: Model whose datasets determine the dataset controls.

        Returns:
            BindingRegistry with static and index-keyed dataset bindings.
        """

        bindings = list(STATIC_BINDINGS)
        if model.options.axes.secondary_y is not None:
            bindings.append(SECONDARY_AXIS_BINDING)
        for index in range(len(model.datasets)):
            for field, attribute, codec, live, derive in DATASET_FIELDS:
                bindings.append(
                    Binding(
                        control=dataset_control(index, field),
                        path=("datasets", index, attribute),
                        codec=codec,
                        live=live,
                        derive=derive,
                    )
                )
        return cls(tuple(bindings))

    def __contains__(self, control: object) -> bool:
        return control in self._bindings

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    def controls(self) -> tuple[str, ...]:
        """Return every bound control name in registration order."""

        return tuple(self._bindings)

    def get(self, control: str) -> Binding:
        """Return the binding for `control`.

        Raises:
            KeyError: When no such control is bound.
        """

        try:
            return self._bindings[control]
        except KeyError:
            raise KeyError(f"No binding registered for control {control!r}.") from None

    def hydrate(self, model: ChartModel) -> dict[str, Any]:
        """Return `{control: display value}` for every bound control."""

        return {
            binding.control: binding.codec.format(_read(model, binding.path))
            for binding in self._bindings.values()
        }

    def commit(self, model: ChartModel, control: str, raw: Any, *, event: ControlEvent) -> CommitResult:
        """Write one control value into the model.

        Args:
            model: Model to mutate.
            control: Control name.
            raw: Raw control value (string from form data, or JSON scalar).
            event: `input` for per-tick events, `change` for completed edits.

        Returns:
            CommitResult. `applied` is False when the event does not trigger this
            control or the value could not be parsed.

        Raises:
            KeyError: When `control` is not bound.
        """

        binding = self.get(control)
        if event != binding.trigger:
            return CommitResult(control=control, applied=False)
        try:
            value = binding.codec.parse(raw)
        except (TypeError, ValueError, OverflowError) as exc:
            logger.warning("Ignoring unparseable value for %s: %r (%s)", control, raw, exc)
            return CommitResult(control=control, applied=False)
        _write(model, binding.path, value)
        if binding.derive is not None:
            binding.derive(model, binding.path, value)
        readout = _readout(value) if binding.live else None
        return CommitResult(control=control, applied=True, value=value, readout=readout)


def apply_palette_color(model: ChartModel, color: str, *, selected_index: int | None = None) -> int:
    """Apply a palette color to the selected dataset.

    The line color takes the palette color and the fill color is re-derived
    from it. Without a (valid) selection the first dataset is used.

    Returns:
        Index of the dataset that was updated.
    """

    index = selected_index if selected_index is not None and 0 <= selected_index < len(model.datasets) else 0
    hex_color = to_hex(color)
    dataset = model.datasets[index]
    dataset.line_color = hex_color
    dataset.fill_color = fill_from_line(hex_color)
    return index


def _read(model: ChartModel, path: Path) -> Any:
    node: Any = model
    for step in path:
        node = node[step] if isinstance(step, int) else getattr(node, step)
    return node


def _write(model: ChartModel, path: Path, value: Any) -> None:
    parent = _read(model, path[:-1])
    last = path[-1]
    if isinstance(last, int):
        parent[last] = value
    else:
        setattr(parent, last, value)


def _readout(value: Any) -> str:
    if isinstance(value, float):
        return _format_number(value)
    return str(value)
