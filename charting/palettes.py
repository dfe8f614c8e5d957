"""Palettes and fixed choice tables shared by the model and the editor forms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

ChartType = Literal["basic", "multiAxis", "stepped", "interpolated", "points", "filled"]
DashPattern = Literal["solid", "dashed", "dotted"]
FillMode = Literal["none", "origin", "start", "end"]
LegendPosition = Literal["top", "bottom", "left", "right"]
Tab = Literal["data", "options", "layout", "preview"]
GridLines = Literal["both", "x", "y", "none"]


@dataclass(frozen=True, slots=True)
class Palette:
    """A named, ordered set of hex colors.

    Args:
        name: Display name shown above the swatches.
        colors: Hex colors in swatch order.
    """

    name: str
    colors: tuple[str, ...]


PALETTES: Final[tuple[Palette, ...]] = (
    Palette(
        name="Default",
        colors=("#4dc9f6", "#f67019", "#f53794", "#537bc4", "#acc236", "#166a8f", "#00a950", "#58595b"),
    ),
    Palette(
        name="Pastel",
        colors=("#f1c0e8", "#cfbaf0", "#a3c4f3", "#90dbf4", "#8eecf5", "#98f5e1", "#b9fbc0", "#f1f8b8"),
    ),
    Palette(
        name="Bold",
        colors=("#ff595e", "#ffca3a", "#8ac926", "#1982c4", "#6a4c93", "#f15bb5", "#00bbf9", "#00f5d4"),
    ),
    Palette(
        name="Monochrome",
        colors=("#0466c8", "#0353a4", "#023e7d", "#002855", "#001845", "#001233", "#33415c", "#5c677d"),
    ),
)

# Palette used when new datasets pick their color.
GLOBAL_PALETTE: Final[tuple[str, ...]] = PALETTES[0].colors

FONT_FAMILIES: Final[tuple[str, ...]] = (
    "Arial",
    "Helvetica",
    "Times New Roman",
    "Courier New",
    "Verdana",
    "Georgia",
    "Palatino",
    "Garamond",
    "Bookman",
    "Tahoma",
    "Trebuchet MS",
)

# Inclusive (minimum, maximum) bounds shared by the editor controls and imports.
TITLE_FONT_SIZE_RANGE: Final[tuple[int, int]] = (10, 32)
AXIS_FONT_SIZE_RANGE: Final[tuple[int, int]] = (8, 16)
LINE_WIDTH_RANGE: Final[tuple[int, int]] = (1, 10)
POINT_RADIUS_RANGE: Final[tuple[int, int]] = (0, 10)

CHART_TYPE_CHOICES: Final[tuple[tuple[str, str], ...]] = (
    ("basic", "Basic Line Chart"),
    ("multiAxis", "Multi-Axis Line Chart"),
    ("stepped", "Stepped Line Chart"),
    ("interpolated", "Interpolated Line Chart"),
    ("points", "Line Chart with Points"),
    ("filled", "Filled Line Chart"),
)
CHART_TYPE_ALIASES: Final[dict[str, str]] = {"multi-axis": "multiAxis"}

POINT_STYLE_CHOICES: Final[tuple[tuple[str, str], ...]] = (
    ("circle", "Circle"),
    ("cross", "Cross"),
    ("crossRot", "Cross (Rotated)"),
    ("dash", "Dash"),
    ("line", "Line"),
    ("rect", "Rectangle"),
    ("rectRounded", "Rectangle (Rounded)"),
    ("rectRot", "Rectangle (Rotated)"),
    ("star", "Star"),
    ("triangle", "Triangle"),
)

DASH_PATTERN_CHOICES: Final[tuple[tuple[str, str], ...]] = (
    ("solid", "Solid"),
    ("dashed", "Dashed"),
    ("dotted", "Dotted"),
)
DASH_PATTERNS: Final[dict[str, tuple[int, ...]]] = {
    "solid": (),
    "dashed": (5, 5),
    "dotted": (2, 2),
}

FILL_MODE_CHOICES: Final[tuple[tuple[str, str], ...]] = (
    ("none", "No Fill"),
    ("origin", "Fill to Origin"),
    ("start", "Fill to Start"),
    ("end", "Fill to End"),
)

LEGEND_POSITION_CHOICES: Final[tuple[tuple[str, str], ...]] = (
    ("top", "Top"),
    ("bottom", "Bottom"),
    ("left", "Left"),
    ("right", "Right"),
)

GRID_LINE_CHOICES: Final[tuple[tuple[str, str], ...]] = (
    ("both", "Both Axes"),
    ("x", "X-Axis Only"),
    ("y", "Y-Axis Only"),
    ("none", "No Grid Lines"),
)

TAB_CHOICES: Final[tuple[tuple[str, str], ...]] = (
    ("data", "Data"),
    ("options", "Chart Options"),
    ("layout", "Layout & Colors"),
    ("preview", "Preview"),
)


def choice_values(choices: tuple[tuple[str, str], ...]) -> frozenset[str]:
    """Return the set of values from a `(value, label)` choice table."""

    return frozenset(value for value, _label in choices)


def clamp(value: int, bounds: tuple[int, int]) -> int:
    """Clamp `value` into an inclusive `(minimum, maximum)` range."""

    minimum, maximum = bounds
    return max(minimum, min(maximum, value))


def normalize_chart_type(value: str) -> str:
    """Map legacy chart-type spellings to their canonical value."""

    text = (value or "").strip()
    return CHART_TYPE_ALIASES.get(text, text)


def dash_array(pattern: str) -> list[int]:
    """Return the numeric dash array for a named pattern (unknown reads as solid)."""

    return list(DASH_PATTERNS.get(pattern, ()))


def dash_pattern_name(values: object) -> str:
    """Return the named pattern for a numeric dash array (unknown reads as solid)."""

    if not isinstance(values, (list, tuple)):
        return "solid"
    try:
        key = tuple(int(v) for v in values)
    except (TypeError, ValueError):
        return "solid"
    for name, pattern in DASH_PATTERNS.items():
        if pattern == key:
            return name
    return "solid"


def grid_lines_value(*, x: bool, y: bool) -> str:
    """Encode per-axis grid flags as a grid-lines choice value."""

    if x and y:
        return "both"
    if x:
        return "x"
    if y:
        return "y"
    return "none"


def grid_flags(value: str) -> tuple[bool, bool]:
    """Decode a grid-lines choice value into `(x, y)` flags."""

    return value in {"both", "x"}, value in {"both", "y"}
