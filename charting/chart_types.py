"""One-shot chart-type transforms.

Picking a chart type is a command, not a mode: each transform edits the current
datasets (and, for multi-axis, the axis options) in place and leaves every
field it does not name alone. Applying `stepped` and then `filled` therefore
yields stepped, filled lines; nothing "undoes" a previous type.
"""

from __future__ import annotations

from collections.abc import Callable

from .model import PRIMARY_AXIS_ID, SECONDARY_AXIS_ID, AxisOptions, ChartModel
from .palettes import choice_values, CHART_TYPE_CHOICES, normalize_chart_type

CHART_TYPES = choice_values(CHART_TYPE_CHOICES)
SECONDARY_AXIS_TITLE = "Secondary Axis"


def _basic(model: ChartModel) -> None:
    for dataset in model.datasets:
        dataset.tension = 0.0
        dataset.fill_mode = "none"
        dataset.stepped = False


def _multi_axis(model: ChartModel) -> None:
    if len(model.datasets) < 2:
        return
    if model.options.axes.secondary_y is None:
        model.options.axes.secondary_y = AxisOptions(title=SECONDARY_AXIS_TITLE)
    model.datasets[1].secondary_axis_id = SECONDARY_AXIS_ID
    model.datasets[0].secondary_axis_id = PRIMARY_AXIS_ID


def _stepped(model: ChartModel) -> None:
    for dataset in model.datasets:
        dataset.stepped = True
        dataset.tension = 0.0


def _interpolated(model: ChartModel) -> None:
    for dataset in model.datasets:
        dataset.stepped = False
        dataset.tension = 0.4
        dataset.fill_mode = "none"


def _points(model: ChartModel) -> None:
    for dataset in model.datasets:
        dataset.point_radius = 6
        dataset.point_hover_radius = 8
        dataset.tension = 0.0


def _filled(model: ChartModel) -> None:
    for dataset in model.datasets:
        dataset.fill_mode = "origin"


_TRANSFORMS: dict[str, Callable[[ChartModel], None]] = {
    "basic": _basic,
    "multiAxis": _multi_axis,
    "stepped": _stepped,
    "interpolated": _interpolated,
    "points": _points,
    "filled": _filled,
}


def apply_chart_type(model: ChartModel, chart_type: str) -> str:
    """Apply a chart-type transform to every dataset.

    Args:
        model: Model to mutate.
        chart_type: One of the chart-type values (`multi-axis` is accepted).

    Returns:
        The canonical chart-type value that was applied.

    Raises:
        ValueError: When `chart_type` is not a known type.
    """

    canonical = normalize_chart_type(chart_type)
    transform = _TRANSFORMS.get(canonical)
    if transform is None:
        raise ValueError(f"Unknown chart type: {chart_type!r}.")
    transform(model)
    return canonical
