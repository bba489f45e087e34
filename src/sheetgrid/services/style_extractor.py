"""Extract background colors and sparse style records from raw cell styles."""

from __future__ import annotations

from dataclasses import dataclass, field

from sheetgrid.grid_document import (
    BorderSpec,
    HorizontalAlign,
    LineStyle,
    StyleRecord,
    VerticalAlign,
)
from sheetgrid.services.color_resolver import BLACK, resolve
from sheetgrid.services.degradation import DegradationHandler, absorb
from sheetgrid.services.workbook_decoder import (
    RawAlignment,
    RawBorderSide,
    RawFill,
    RawFont,
    RawStyle,
)
from sheetgrid.utils.exceptions import CellDegradation

# Screen pixels per typographic point.
PX_PER_PT = 96 / 72

INDENT_PX_PER_LEVEL = 8

STACKED_TEXT_ROTATION = 255

HORIZONTAL_ALIGN: dict[str, HorizontalAlign] = {
    "left": HorizontalAlign.LEFT,
    "fill": HorizontalAlign.LEFT,
    "center": HorizontalAlign.CENTER,
    "centerContinuous": HorizontalAlign.CENTER,
    "right": HorizontalAlign.RIGHT,
    "justify": HorizontalAlign.JUSTIFY,
    "distributed": HorizontalAlign.JUSTIFY,
}

VERTICAL_ALIGN: dict[str, VerticalAlign] = {
    "top": VerticalAlign.TOP,
    "center": VerticalAlign.MIDDLE,
    "middle": VerticalAlign.MIDDLE,
    "bottom": VerticalAlign.BOTTOM,
}

BORDER_STYLES: dict[str, tuple[float, LineStyle]] = {
    "thin": (1.0, LineStyle.SOLID),
    "medium": (2.0, LineStyle.SOLID),
    "thick": (3.0, LineStyle.SOLID),
    "dashed": (1.0, LineStyle.DASHED),
    "dashDot": (1.0, LineStyle.DASHED),
    "dashDotDot": (1.0, LineStyle.DASHED),
    "slantDashDot": (1.0, LineStyle.DASHED),
    "mediumDashed": (2.0, LineStyle.DASHED),
    "mediumDashDot": (2.0, LineStyle.DASHED),
    "mediumDashDotDot": (2.0, LineStyle.DASHED),
    "dotted": (1.0, LineStyle.DOTTED),
    "double": (3.0, LineStyle.DOUBLE),
    "hair": (0.5, LineStyle.SOLID),
}

DEFAULT_BORDER_STYLE: tuple[float, LineStyle] = (1.0, LineStyle.SOLID)


@dataclass(frozen=True)
class StyleExtraction:
    """Background color and style record of one cell."""

    background: str | None = None
    style: StyleRecord = field(default_factory=StyleRecord)


def extract(
    raw_style: RawStyle | None,
    on_degraded: DegradationHandler | None = None,
) -> StyleExtraction:
    """Extract the background and style record of a cell.

    Each aspect (fill, font, alignment, borders) degrades independently, so
    one malformed attribute never discards the rest of the cell's style.
    """
    if raw_style is None:
        return StyleExtraction()

    background = absorb(
        "fill", lambda: extract_background(raw_style.fill), None, on_degraded
    )
    attributes: dict[str, object] = {}
    attributes.update(
        absorb("font", lambda: _font_fields(raw_style.font), {}, on_degraded)
    )
    attributes.update(
        absorb(
            "alignment",
            lambda: _alignment_fields(raw_style.alignment, on_degraded),
            {},
            on_degraded,
        )
    )
    for side, raw_side in raw_style.borders.items():
        spec = absorb("border", lambda s=raw_side: border_spec(s), None, on_degraded)
        if spec is not None:
            attributes[f"border_{side}"] = spec

    return StyleExtraction(background=background, style=StyleRecord(**attributes))


def extract_background(fill: RawFill | None) -> str | None:
    """Return the first resolvable fill color in lookup order."""
    if fill is None:
        return None
    for descriptor in (
        fill.pattern_fg,
        fill.pattern_bg,
        fill.legacy_bg,
        fill.legacy_fg,
    ):
        color = resolve(descriptor)
        if color is not None:
            return color
    return None


def border_spec(side: RawBorderSide) -> BorderSpec:
    """Map one border side to its pixel width, line style and color."""
    width_px, line_style = BORDER_STYLES.get(side.style, DEFAULT_BORDER_STYLE)
    return BorderSpec(
        width_px=width_px, style=line_style, color=resolve(side.color) or BLACK
    )


def points_to_pixels(size_pt: float) -> float:
    return round(size_pt * PX_PER_PT, 2)


def _font_fields(font: RawFont | None) -> dict[str, object]:
    if font is None:
        return {}
    result: dict[str, object] = {}
    if font.bold:
        result["bold"] = True
    if font.italic:
        result["italic"] = True
    if font.underline and font.underline != "none":
        result["underline"] = True
    if font.strikethrough:
        result["strikethrough"] = True
    text_color = resolve(font.color)
    if text_color is not None and text_color != BLACK:
        result["text_color"] = text_color
    if font.size_pt:
        result["font_size_px"] = points_to_pixels(float(font.size_pt))
    if font.name:
        result["font_family"] = font.name
    return result


def _alignment_fields(
    alignment: RawAlignment | None, on_degraded: DegradationHandler | None
) -> dict[str, object]:
    if alignment is None:
        return {}
    result: dict[str, object] = {}
    if alignment.horizontal and alignment.horizontal != "general":
        result["horizontal_align"] = HORIZONTAL_ALIGN.get(
            alignment.horizontal, HorizontalAlign.LEFT
        )
    if alignment.vertical:
        result["vertical_align"] = VERTICAL_ALIGN.get(
            alignment.vertical, VerticalAlign.BOTTOM
        )
    if alignment.wrap_text is not None:
        result["wrap_text"] = bool(alignment.wrap_text)
    if alignment.text_rotation:
        rotation = absorb(
            "rotation",
            lambda: rotation_degrees(int(alignment.text_rotation or 0)),
            None,
            on_degraded,
        )
        if rotation is not None:
            result["rotation_deg"] = rotation
    if alignment.indent:
        result["indent_px"] = int(round(alignment.indent * INDENT_PX_PER_LEVEL))
    return result


def rotation_degrees(text_rotation: int) -> int:
    """Convert a stored text rotation to signed degrees.

    Raises:
        CellDegradation: For stacked text and out-of-range values.
    """
    if 0 <= text_rotation <= 90:
        return text_rotation
    if 90 < text_rotation <= 180:
        return -(text_rotation - 90)
    if text_rotation == STACKED_TEXT_ROTATION:
        raise CellDegradation("Stacked text cannot be represented", aspect="rotation")
    raise CellDegradation(
        f"Text rotation out of range: {text_rotation}", aspect="rotation"
    )
