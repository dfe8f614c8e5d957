"""Portable JSON document for moving a chart between editor instances.

The exported document carries only the chart-relevant part of the model:

    {"chartType", "chartTitle", "labels", "datasets", "options"}

It never contains view state or an instance id. Imports are partial merges:
`labels`, `datasets` and `options` are each optional and only overwrite what
they contain. The dataset/options encoders are shared with the persistence
snapshot format.
"""

from __future__ import annotations

import copy
import json
import logging
import math
from typing import Any, cast

from .colors import fill_from_line, is_color, to_hex
from .model import (
    AnimationOptions,
    AxesOptions,
    AxisOptions,
    ChartModel,
    ChartOptions,
    Dataset,
    FontOptions,
    GridOptions,
    LegendOptions,
    TitleOptions,
    TooltipOptions,
)
from .palettes import (
    AXIS_FONT_SIZE_RANGE,
    DASH_PATTERNS,
    FILL_MODE_CHOICES,
    FONT_FAMILIES,
    GLOBAL_PALETTE,
    LEGEND_POSITION_CHOICES,
    LINE_WIDTH_RANGE,
    POINT_RADIUS_RANGE,
    POINT_STYLE_CHOICES,
    TITLE_FONT_SIZE_RANGE,
    choice_values,
    clamp,
    dash_pattern_name,
)

logger = logging.getLogger(__name__)

EXPORT_FILENAME_STEM = "chart-settings"
_POINT_STYLES = choice_values(POINT_STYLE_CHOICES)
_FILL_MODES = choice_values(FILL_MODE_CHOICES)
_LEGEND_POSITIONS = choice_values(LEGEND_POSITION_CHOICES)
_FONT_FAMILIES = frozenset(FONT_FAMILIES)


class DocumentError(ValueError):
    """Raised internally when an import document has an unusable shape."""


def export_model(model: ChartModel, *, chart_type: str | None = None) -> dict[str, Any]:
    """Encode the chart-relevant subset of a model as a portable document.

    Args:
        model: Model to export.
        chart_type: Last chart type picked in the editor, if any.

    Returns:
        JSON-serializable document.
    """

    return {
        "chartType": chart_type or "basic",
        "chartTitle": model.chart_title,
        "labels": list(model.labels),
        "datasets": [encode_dataset(dataset) for dataset in model.datasets],
        "options": encode_options(model.options),
    }


def export_json(model: ChartModel, *, chart_type: str | None = None) -> str:
    """Return the exported document as indented JSON text."""

    return json.dumps(export_model(model, chart_type=chart_type), indent=2)


def export_filename(instance_id: str | None = None) -> str:
    """Return the suggested download filename for an export."""

    if instance_id:
        return f"{EXPORT_FILENAME_STEM}-{instance_id}.json"
    return f"{EXPORT_FILENAME_STEM}.json"


def parse_document(text: str | bytes | None) -> dict[str, Any] | None:
    """Parse JSON text into a document dictionary.

    Malformed JSON is logged and reported as None rather than raised.
    """

    if text is None:
        return None
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError, UnicodeDecodeError) as exc:
        logger.warning("Ignoring malformed chart settings document: %s", exc)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Ignoring chart settings document that is not a JSON object.")
        return None
    return parsed


def import_model(document: dict[str, Any] | None, target: ChartModel) -> bool:
    """Merge a portable document into `target`.

    All present keys are decoded before anything is written, so an unusable
    document leaves `target` exactly as it was.

    Args:
        document: Parsed document (see `export_model`), or None.
        target: Model to update in place.

    Returns:
        True on success, False when the document is absent or unusable.
    """

    if not isinstance(document, dict):
        return False
    try:
        labels = decode_labels(document["labels"]) if "labels" in document else None
        datasets = decode_datasets(document["datasets"]) if "datasets" in document else None
        options = decode_options(document["options"], base=target.options) if "options" in document else None
    except (DocumentError, TypeError) as exc:
        logger.warning("Rejected chart settings import: %s", exc)
        return False

    if labels is not None:
        target.labels = labels
    if datasets is not None:
        target.datasets = datasets
    if options is not None:
        target.options = options
    return True


def encode_dataset(dataset: Dataset) -> dict[str, Any]:
    """Encode a dataset using the document's camelCase keys."""

    payload: dict[str, Any] = {
        "label": dataset.label,
        "data": [_encode_number(value) for value in dataset.data],
        "lineColor": dataset.line_color,
        "fillColor": dataset.fill_color,
        "lineWidth": dataset.line_width,
        "tension": dataset.tension,
        "pointStyle": dataset.point_style,
        "pointRadius": dataset.point_radius,
        "pointHoverRadius": dataset.point_hover_radius,
        "dashPattern": dataset.dash_pattern,
        "fillMode": dataset.fill_mode,
        "stepped": dataset.stepped,
    }
    if dataset.secondary_axis_id is not None:
        payload["secondaryAxisId"] = dataset.secondary_axis_id
    return payload


def encode_options(options: ChartOptions) -> dict[str, Any]:
    """Encode chart options using the document's camelCase keys."""

    axes: dict[str, Any] = {
        "x": {"title": options.axes.x.title},
        "y": {"title": options.axes.y.title},
    }
    if options.axes.secondary_y is not None:
        axes["secondaryY"] = {"title": options.axes.secondary_y.title}
    return {
        "title": {"displayed": options.title.displayed, "text": options.title.text},
        "legend": {"displayed": options.legend.displayed, "position": options.legend.position},
        "tooltips": {"enabled": options.tooltips.enabled},
        "maintainAspectRatio": options.maintain_aspect_ratio,
        "animation": {"durationMs": options.animation.duration_ms},
        "font": {
            "family": options.font.family,
            "titleSize": options.font.title_size,
            "axisSize": options.font.axis_size,
        },
        "grid": {"x": options.grid.x, "y": options.grid.y},
        "axes": axes,
        "roundedCorners": options.rounded_corners,
        "background": options.background,
    }


def decode_labels(value: object) -> list[str]:
    """Decode a labels list."""

    if not isinstance(value, list):
        raise DocumentError("labels must be a list.")
    return [str(item) for item in value]


def decode_datasets(value: object) -> list[Dataset]:
    """Decode a non-empty list of datasets."""

    if not isinstance(value, list) or not value:
        raise DocumentError("datasets must be a non-empty list.")
    return [decode_dataset(item, index=index) for index, item in enumerate(value)]


def decode_dataset(value: object, *, index: int = 0) -> Dataset:
    """Decode one dataset; missing fields take the new-dataset defaults.

    Chart.js-style keys (`borderColor`, `backgroundColor`, `borderWidth`,
    `borderDash`, `fill`, `yAxisID`) written by older exports are accepted as
    fallbacks.
    """

    if not isinstance(value, dict):
        raise DocumentError(f"datasets[{index}] must be an object.")
    raw = cast(dict[str, Any], value)
    data = raw.get("data", [])
    if not isinstance(data, list):
        raise DocumentError(f"datasets[{index}].data must be a list.")

    fallback_color = GLOBAL_PALETTE[index % len(GLOBAL_PALETTE)]
    line_color = _decode_color(raw.get("lineColor", raw.get("borderColor")), fallback=fallback_color)
    fill_raw = raw.get("fillColor", raw.get("backgroundColor"))
    fill_color = fill_raw.strip() if is_color(fill_raw) else fill_from_line(to_hex(line_color))

    point_radius = _parse_int(raw.get("pointRadius"), default=3, bounds=POINT_RADIUS_RANGE)
    dash_raw = raw.get("dashPattern")
    if isinstance(dash_raw, str) and dash_raw in DASH_PATTERNS:
        dash_pattern = dash_raw
    else:
        # A numeric dash array is read like Chart.js `borderDash`.
        dash_pattern = dash_pattern_name(raw.get("borderDash", dash_raw))

    return Dataset(
        label=str(raw.get("label") if raw.get("label") is not None else f"Dataset {index + 1}"),
        data=[_decode_number(item) for item in data],
        line_color=line_color,
        fill_color=fill_color,
        line_width=_parse_int(raw.get("lineWidth", raw.get("borderWidth")), default=2, bounds=LINE_WIDTH_RANGE),
        tension=_parse_unit_float(raw.get("tension"), default=0.4),
        point_style=_choice(raw.get("pointStyle"), _POINT_STYLES, default="circle"),
        point_radius=point_radius,
        point_hover_radius=_parse_int(raw.get("pointHoverRadius"), default=point_radius + 2, minimum=0),
        dash_pattern=dash_pattern,
        fill_mode=_decode_fill_mode(raw.get("fillMode", raw.get("fill"))),
        stepped=_parse_bool(raw.get("stepped"), default=False),
        secondary_axis_id=_optional_str(raw.get("secondaryAxisId", raw.get("yAxisID"))),
    )


def decode_options(value: object, *, base: ChartOptions | None = None) -> ChartOptions:
    """Decode chart options over `base`; absent keys keep the base value.

    Args:
        value: Options object from a document.
        base: Options to start from (defaults to fresh `ChartOptions`). Not mutated.

    Returns:
        A new ChartOptions instance.
    """

    if not isinstance(value, dict):
        raise DocumentError("options must be an object.")
    raw = cast(dict[str, Any], value)
    current = copy.deepcopy(base) if base is not None else ChartOptions()

    title = _section(raw, "title")
    legend = _section(raw, "legend")
    tooltips = _section(raw, "tooltips")
    animation = _section(raw, "animation")
    font = _section(raw, "font")
    grid = _section(raw, "grid")
    axes = _section(raw, "axes")

    secondary = current.axes.secondary_y
    if "secondaryY" in axes:
        secondary_raw = axes.get("secondaryY")
        if isinstance(secondary_raw, dict):
            secondary = AxisOptions(title=str(secondary_raw.get("title") or ""))
        else:
            secondary = None

    return ChartOptions(
        title=TitleOptions(
            displayed=_parse_bool(title.get("displayed"), default=current.title.displayed),
            text=_text(title.get("text"), default=current.title.text),
        ),
        legend=LegendOptions(
            displayed=_parse_bool(legend.get("displayed"), default=current.legend.displayed),
            position=_choice(legend.get("position"), _LEGEND_POSITIONS, default=current.legend.position),
        ),
        tooltips=TooltipOptions(enabled=_parse_bool(tooltips.get("enabled"), default=current.tooltips.enabled)),
        maintain_aspect_ratio=_parse_bool(raw.get("maintainAspectRatio"), default=current.maintain_aspect_ratio),
        animation=AnimationOptions(
            duration_ms=_parse_int(animation.get("durationMs"), default=current.animation.duration_ms, minimum=0)
        ),
        font=FontOptions(
            family=_choice(font.get("family"), _FONT_FAMILIES, default=current.font.family),
            title_size=_parse_int(
                font.get("titleSize"), default=current.font.title_size, bounds=TITLE_FONT_SIZE_RANGE
            ),
            axis_size=_parse_int(font.get("axisSize"), default=current.font.axis_size, bounds=AXIS_FONT_SIZE_RANGE),
        ),
        grid=GridOptions(
            x=_parse_bool(grid.get("x"), default=current.grid.x),
            y=_parse_bool(grid.get("y"), default=current.grid.y),
        ),
        axes=AxesOptions(
            x=AxisOptions(title=_text(_section(axes, "x").get("title"), default=current.axes.x.title)),
            y=AxisOptions(title=_text(_section(axes, "y").get("title"), default=current.axes.y.title)),
            secondary_y=secondary,
        ),
        rounded_corners=_parse_bool(raw.get("roundedCorners"), default=current.rounded_corners),
        background=to_hex(raw["background"]) if "background" in raw else current.background,
    )


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    """Return a nested object, treating absent sections as empty."""

    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DocumentError(f"{key} must be an object.")
    return cast(dict[str, Any], value)


def _encode_number(value: float) -> float | None:
    """Encode a data value; NaN sentinels become JSON null."""

    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _decode_number(value: object) -> float:
    """Decode a data value; anything non-numeric becomes the NaN sentinel."""

    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value))
    except (TypeError, ValueError):
        return math.nan


def _decode_color(value: object, *, fallback: str) -> str:
    """Decode a line color, failing closed to the neutral hex when unparseable."""

    if value is None or value == "":
        return fallback
    if is_color(value):
        return str(value).strip()
    return to_hex(str(value))


def _decode_fill_mode(value: object) -> str:
    """Decode a fill mode; Chart.js `false` reads as `none`."""

    if value is False or value is None:
        return "none"
    return _choice(value, _FILL_MODES, default="none")


def _choice(value: object, allowed: frozenset[str], *, default: str) -> str:
    """Return `value` when it is an allowed choice, otherwise `default`."""

    if isinstance(value, str) and value in allowed:
        return value
    return default


def _text(value: object, *, default: str) -> str:
    """Return `value` as text; null reads as absent."""

    if value is None:
        return default
    return str(value)


def _optional_str(value: object) -> str | None:
    """Return a non-empty string or None."""

    if value is None or value == "":
        return None
    return str(value)


def _parse_int(
    value: object,
    *,
    default: int,
    minimum: int | None = None,
    bounds: tuple[int, int] | None = None,
) -> int:
    """Best-effort int parsing for document values.

    Args:
        value: Raw document value.
        default: Value used when `value` is absent or unparseable.
        minimum: Lower bound for open-ended values.
        bounds: Inclusive `(minimum, maximum)` range the result is clamped into.
    """

    parsed = default
    if value is not None and value != "" and not isinstance(value, bool):
        try:
            parsed = int(float(str(value)))
        except (ValueError, OverflowError):
            parsed = default
    if minimum is not None and parsed < minimum:
        parsed = minimum
    if bounds is not None:
        parsed = clamp(parsed, bounds)
    return parsed


def _parse_unit_float(value: object, *, default: float) -> float:
    """Best-effort float parsing clamped to [0, 1]."""

    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        parsed = float(str(value))
    except ValueError:
        return default
    if math.isnan(parsed):
        return default
    return min(1.0, max(0.0, parsed))


def _parse_bool(value: object, *, default: bool) -> bool:
    """Best-effort bool parsing for document values."""

    if isinstance(value, bool):
        return value
    if value is None:
        return default
    normalized = str(value).strip().casefold()
    return normalized in {"1", "true", "yes", "on"}
