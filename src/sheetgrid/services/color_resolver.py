"""Resolve spreadsheet color descriptors to canonical ``#RRGGBB`` strings.

Workbooks encode colors three ways: a direct (A)RGB value, an index into
the legacy 56+10 color palette, or a theme slot with an optional tint. The
decoder turns each openpyxl color into exactly one of the descriptor
variants below, and :func:`resolve` maps a descriptor to a hex string or
``None`` ("no color"). Resolution never raises.
"""

from __future__ import annotations

import math
import string
from dataclasses import dataclass
from typing import Any

WHITE = "#FFFFFF"
BLACK = "#000000"

# Legacy palette (indices 0-65). 64 and 65 are the system foreground and
# background colors.
INDEXED_COLORS: dict[int, str] = {
    0: "#000000", 1: "#FFFFFF", 2: "#FF0000", 3: "#00FF00",
    4: "#0000FF", 5: "#FFFF00", 6: "#FF00FF", 7: "#00FFFF",
    8: "#000000", 9: "#FFFFFF", 10: "#FF0000", 11: "#00FF00",
    12: "#0000FF", 13: "#FFFF00", 14: "#FF00FF", 15: "#00FFFF",
    16: "#800000", 17: "#008000", 18: "#000080", 19: "#808000",
    20: "#800080", 21: "#008080", 22: "#C0C0C0", 23: "#808080",
    24: "#9999FF", 25: "#993366", 26: "#FFFFCC", 27: "#CCFFFF",
    28: "#660066", 29: "#FF8080", 30: "#0066CC", 31: "#CCCCFF",
    32: "#000080", 33: "#FF00FF", 34: "#FFFF00", 35: "#00FFFF",
    36: "#800080", 37: "#800000", 38: "#008080", 39: "#0000FF",
    40: "#00CCFF", 41: "#CCFFFF", 42: "#CCFFCC", 43: "#FFFF99",
    44: "#99CCFF", 45: "#FF99CC", 46: "#CC99FF", 47: "#FFCC99",
    48: "#3366FF", 49: "#33CCCC", 50: "#99CC00", 51: "#FFCC00",
    52: "#FF9900", 53: "#FF6600", 54: "#666699", 55: "#969696",
    56: "#003366", 57: "#339966", 58: "#003300", 59: "#333300",
    60: "#993300", 61: "#993366", 62: "#333399", 63: "#333333",
    64: "#000000", 65: "#FFFFFF",
}  # fmt: skip

# Default Office theme as indexed by cell colors: background 1, text 1,
# background 2, text 2, then accents 1-6.
THEME_COLORS: dict[int, str] = {
    0: "#FFFFFF", 1: "#000000", 2: "#E7E6E6", 3: "#44546A",
    4: "#5B9BD5", 5: "#ED7D31", 6: "#A5A5A5", 7: "#FFC000",
    8: "#4472C4", 9: "#70AD47",
}  # fmt: skip

_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class DirectColor:
    """An RGB or ARGB hex value as stored in the workbook."""

    rgb: str


@dataclass(frozen=True)
class IndexedColor:
    """An index into the legacy color palette."""

    index: int


@dataclass(frozen=True)
class ThemeColor:
    """A theme slot plus an optional brightness tint in ``[-1, 1]``."""

    theme: int
    tint: float | None = None


ColorDescriptor = DirectColor | IndexedColor | ThemeColor


def descriptor_from_openpyxl(color: Any) -> ColorDescriptor | None:
    """Convert an openpyxl ``Color`` into a descriptor variant.

    Returns ``None`` for automatic colors and anything that is not one of the
    three supported encodings.
    """
    if color is None:
        return None
    color_type = getattr(color, "type", None)
    if color_type == "rgb":
        rgb = getattr(color, "rgb", None)
        return DirectColor(rgb) if isinstance(rgb, str) else None
    if color_type == "indexed":
        indexed = getattr(color, "indexed", None)
        return IndexedColor(indexed) if isinstance(indexed, int) else None
    if color_type == "theme":
        theme = getattr(color, "theme", None)
        if not isinstance(theme, int):
            return None
        tint = getattr(color, "tint", None)
        return ThemeColor(theme, float(tint) if tint else None)
    return None


def resolve(descriptor: ColorDescriptor | None) -> str | None:
    """Resolve a color descriptor to ``#RRGGBB``, or ``None`` for no color."""
    if isinstance(descriptor, DirectColor):
        return _resolve_direct(descriptor.rgb)
    if isinstance(descriptor, IndexedColor):
        return INDEXED_COLORS.get(descriptor.index)
    if isinstance(descriptor, ThemeColor):
        base = THEME_COLORS.get(descriptor.theme)
        if base is None:
            return None
        tint = descriptor.tint
        if tint is None or tint == 0 or not -1.0 <= tint <= 1.0:
            return base
        return apply_tint(base, tint)
    return None


def apply_tint(hex_color: str, tint: float) -> str:
    """Lighten (positive tint) or darken (negative tint) a ``#RRGGBB`` color."""
    value = int(hex_color[1:], 16)
    channels = ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
    if tint < 0:
        tinted = [_round_half_up(c * (1 + tint)) for c in channels]
    else:
        tinted = [_round_half_up(c * (1 - tint) + 255 * tint) for c in channels]
    r, g, b = (min(255, max(0, c)) for c in tinted)
    return f"#{r:02X}{g:02X}{b:02X}"


def _resolve_direct(rgb: str) -> str | None:
    cleaned = rgb.strip().lstrip("#")
    if len(cleaned) == 8:
        cleaned = cleaned[2:]
    if not cleaned or len(cleaned) > 6 or not set(cleaned) <= _HEX_DIGITS:
        return None
    return "#" + cleaned.upper().rjust(6, "0")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
