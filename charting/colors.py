"""Conversions between hex colors and alpha-blended `rgba(...)` strings."""

from __future__ import annotations

import re
from typing import Final

NEUTRAL_HEX: Final[str] = "#000000"
FILL_ALPHA: Final[float] = 0.2

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")
_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9.]+)\s*)?\)$",
    re.IGNORECASE,
)


def to_alpha_color(hex_color: str, alpha: float) -> str:
    """Encode a 6-digit hex color as an `rgba(...)` string.

    Args:
        hex_color: Color in `#rrggbb` form (the leading `#` is optional).
        alpha: Opacity in the closed range [0, 1].

    Returns:
        An `rgba(r, g, b, a)` string.

    Raises:
        ValueError: When the hex value or alpha is out of contract.
    """

    match = _HEX_RE.match(hex_color.strip())
    if match is None:
        raise ValueError(f"Expected a 6-digit hex color, got {hex_color!r}.")
    if not 0.0 <= float(alpha) <= 1.0:
        raise ValueError(f"Alpha must be within [0, 1], got {alpha!r}.")
    digits = match.group(1)
    r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {_format_alpha(alpha)})"


def to_hex(color: str) -> str:
    """Decode a color string back to lowercase `#rrggbb`.

    Accepts `#rrggbb`, `rgb(...)` and `rgba(...)`. Alpha is dropped since hex has
    no alpha channel. Colors may come from untrusted import documents, so any
    value that cannot be parsed yields `NEUTRAL_HEX` instead of raising.

    Args:
        color: Color value to decode.

    Returns:
        Lowercase 6-digit hex color.
    """

    if not isinstance(color, str):
        return NEUTRAL_HEX
    text = color.strip()
    hex_match = _HEX_RE.match(text)
    if hex_match is not None:
        return f"#{hex_match.group(1).lower()}"
    rgb_match = _RGB_RE.match(text)
    if rgb_match is None:
        return NEUTRAL_HEX
    channels = [int(rgb_match.group(i)) for i in (1, 2, 3)]
    if any(channel > 255 for channel in channels):
        return NEUTRAL_HEX
    return "#" + "".join(f"{channel:02x}" for channel in channels)


def fill_from_line(hex_color: str) -> str:
    """Return the translucent fill color derived from a line color."""

    return to_alpha_color(hex_color, FILL_ALPHA)


def is_color(value: object) -> bool:
    """Return True when `value` is a color string `to_hex` can decode."""

    if not isinstance(value, str):
        return False
    text = value.strip()
    return _HEX_RE.match(text) is not None or _RGB_RE.match(text) is not None


def _format_alpha(alpha: float) -> str:
    """Format alpha without trailing zeros (`0.2`, `1`, `0.35`)."""

    text = f"{float(alpha):.3f}".rstrip("0").rstrip(".")
    return text or "0"
