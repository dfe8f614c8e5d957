"""Build the Chart.js configuration object for a ChartModel."""

from __future__ import annotations

import math
from typing import Any, TypedDict

from .model import PRIMARY_AXIS_ID, SECONDARY_AXIS_ID, ChartModel, Dataset
from .palettes import dash_array


class ChartJsDataset(TypedDict, total=False):
    """A Chart.js line dataset payload."""

    label: str
    data: list[float | None]
    borderColor: str
    backgroundColor: str
    borderWidth: int
    borderDash: list[int]
    tension: float
    pointStyle: str
    pointRadius: int
    pointHoverRadius: int
    fill: bool | str
    stepped: bool
    yAxisID: str


class ChartJsData(TypedDict):
    """Labels plus datasets."""

    labels: list[str]
    datasets: list[ChartJsDataset]


class ChartJsConfig(TypedDict):
    """The full object passed to `new Chart(canvas, config)`."""

    type: str
    data: ChartJsData
    options: dict[str, Any]


def build_chartjs_config(model: ChartModel) -> ChartJsConfig:
    """Translate the model into a Chart.js line-chart configuration.

    Args:
        model: Model to translate.

    Returns:
        A JSON-serializable Chart.js config.
    """

    return {
        "type": "line",
        "data": {
            "labels": list(model.labels),
            "datasets": [_dataset(dataset) for dataset in model.datasets],
        },
        "options": _options(model),
    }


def _dataset(dataset: Dataset) -> ChartJsDataset:
    payload: ChartJsDataset = {
        "label": dataset.label,
        "data": [None if isinstance(v, float) and math.isnan(v) else v for v in dataset.data],
        "borderColor": dataset.line_color,
        "backgroundColor": dataset.fill_color,
        "borderWidth": dataset.line_width,
        "borderDash": dash_array(dataset.dash_pattern),
        "tension": dataset.tension,
        "pointStyle": dataset.point_style,
        "pointRadius": dataset.point_radius,
        "pointHoverRadius": dataset.point_hover_radius,
        "fill": False if dataset.fill_mode == "none" else dataset.fill_mode,
        "stepped": dataset.stepped,
    }
    if dataset.secondary_axis_id:
        payload["yAxisID"] = dataset.secondary_axis_id
    return payload


def _options(model: ChartModel) -> dict[str, Any]:
    options = model.options
    family = options.font.family
    axis_title_font = {"family": family, "size": options.font.axis_size + 2}
    tick_font = {"size": options.font.axis_size}

    scales: dict[str, Any] = {
        "x": {
            "display": True,
            "title": {"display": True, "text": options.axes.x.title, "font": axis_title_font},
            "ticks": {"font": tick_font},
            "grid": {"display": options.grid.x},
        },
        PRIMARY_AXIS_ID: {
            "display": True,
            "title": {"display": True, "text": options.axes.y.title, "font": axis_title_font},
            "ticks": {"font": tick_font},
            "grid": {"display": options.grid.y},
        },
    }
    if options.axes.secondary_y is not None:
        scales[SECONDARY_AXIS_ID] = {
            "type": "linear",
            "display": True,
            "position": "right",
            "grid": {"drawOnChartArea": False},
            "title": {"display": True, "text": options.axes.secondary_y.title, "font": axis_title_font},
        }

    return {
        "responsive": True,
        "maintainAspectRatio": options.maintain_aspect_ratio,
        "animation": {"duration": options.animation.duration_ms},
        "font": {"family": family},
        "plugins": {
            "title": {
                "display": options.title.displayed,
                "text": options.title.text,
                "font": {"family": family, "size": options.font.title_size},
            },
            "legend": {"display": options.legend.displayed, "position": options.legend.position},
            "tooltip": {"enabled": options.tooltips.enabled},
        },
        "elements": {
            "line": {
                "borderCapStyle": "round" if options.rounded_corners else "butt",
                "borderJoinStyle": "round" if options.rounded_corners else "miter",
            }
        },
        "scales": scales,
    }
