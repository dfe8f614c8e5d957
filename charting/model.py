"""In-memory configuration model for a single line chart.

The model is the single source of truth for the editor. Form controls only ever
hydrate from it or commit into it; they are never read back to recover state.

Invariants:
- `ChartModel.datasets` is never empty (enforced by `charting.datasets`).
- `Dataset.point_hover_radius` tracks `point_radius + 2` whenever the radius is
  edited through the editor.
- `len(Dataset.data) == len(ChartModel.labels)` is expected but not enforced.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .colors import fill_from_line
from .palettes import GLOBAL_PALETTE

DEFAULT_LABELS: tuple[str, ...] = ("January", "February", "March", "April", "May", "June")
DEFAULT_DATA: tuple[float, ...] = (65, 59, 80, 81, 56, 55)
SECONDARY_AXIS_ID = "y1"
PRIMARY_AXIS_ID = "y"


@dataclass(slots=True)
class Dataset:
    """One data series plus its line styling.

    Args:
        label: Legend label.
        data: Values, one per label index.
        line_color: Line (border) color, normally `#rrggbb`.
        fill_color: Area fill color, normally `rgba(...)`. Edited independently of
            `line_color` once the dataset exists.
        line_width: Line width in pixels (>= 1).
        tension: Bezier curve tension in [0, 1].
        point_style: Chart.js point style name.
        point_radius: Point radius in pixels (>= 0).
        point_hover_radius: Hover radius, derived from `point_radius`.
        dash_pattern: Named dash pattern (solid/dashed/dotted).
        fill_mode: Area fill target (none/origin/start/end).
        stepped: Whether the line is drawn as steps.
        secondary_axis_id: Optional y-axis id the dataset is bound to.
    """

    label: str
    data: list[float]
    line_color: str
    fill_color: str
    line_width: int = 2
    tension: float = 0.4
    point_style: str = "circle"
    point_radius: int = 3
    point_hover_radius: int = 5
    dash_pattern: str = "solid"
    fill_mode: str = "none"
    stepped: bool = False
    secondary_axis_id: str | None = None


def new_dataset(*, label: str, data: list[float], color: str) -> Dataset:
    """Create a dataset with fixed defaults and a fill derived from `color`."""

    return Dataset(label=label, data=list(data), line_color=color, fill_color=fill_from_line(color))


@dataclass(slots=True)
class TitleOptions:
    displayed: bool = True
    text: str = "Your Chart Title"


@dataclass(slots=True)
class LegendOptions:
    displayed: bool = True
    position: str = "top"


@dataclass(slots=True)
class TooltipOptions:
    enabled: bool = True


@dataclass(slots=True)
class AnimationOptions:
    duration_ms: int = 1000


@dataclass(slots=True)
class FontOptions:
    family: str = "Arial"
    title_size: int = 16
    axis_size: int = 12


@dataclass(slots=True)
class GridOptions:
    x: bool = True
    y: bool = True


@dataclass(slots=True)
class AxisOptions:
    title: str = ""


@dataclass(slots=True)
class AxesOptions:
    """Axis titles; `secondary_y` exists only after a multi-axis transform."""

    x: AxisOptions = field(default_factory=lambda: AxisOptions(title="Month"))
    y: AxisOptions = field(default_factory=lambda: AxisOptions(title="Value"))
    secondary_y: AxisOptions | None = None


@dataclass(slots=True)
class ChartOptions:
    """Chart-wide display options."""

    title: TitleOptions = field(default_factory=TitleOptions)
    legend: LegendOptions = field(default_factory=LegendOptions)
    tooltips: TooltipOptions = field(default_factory=TooltipOptions)
    maintain_aspect_ratio: bool = False
    animation: AnimationOptions = field(default_factory=AnimationOptions)
    font: FontOptions = field(default_factory=FontOptions)
    grid: GridOptions = field(default_factory=GridOptions)
    axes: AxesOptions = field(default_factory=AxesOptions)
    rounded_corners: bool = True
    background: str = "#ffffff"


@dataclass(slots=True)
class ChartModel:
    """The canonical chart configuration edited by one editor instance."""

    labels: list[str]
    datasets: list[Dataset]
    options: ChartOptions = field(default_factory=ChartOptions)

    @property
    def chart_title(self) -> str:
        """Return the chart title text."""

        return self.options.title.text

    @chart_title.setter
    def chart_title(self, value: str) -> None:
        self.options.title.text = value


@dataclass(slots=True)
class ViewState:
    """Presentational state of an editor instance (never exported)."""

    editor_visible: bool = True
    active_tab: str = "data"


def default_model() -> ChartModel:
    """Return the starting model for a new editor instance."""

    return ChartModel(
        labels=list(DEFAULT_LABELS),
        datasets=[new_dataset(label="Dataset 1", data=list(DEFAULT_DATA), color=GLOBAL_PALETTE[0])],
    )


def palette_color_in_use(model: ChartModel, color: str) -> bool:
    """Return True when any dataset already draws its line with `color`."""

    wanted = color.strip().lower()
    return any(dataset.line_color.strip().lower() == wanted for dataset in model.datasets)
