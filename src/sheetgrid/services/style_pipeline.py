"""Layer imported cell styles over a grid widget's default presentation.

Run on every visual refresh, so everything here is pure: the document is
only read, and a cell without an override keeps whatever the widget's own
defaults currently are (for instance a global font-size control).
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from sheetgrid.grid_document import (
    BorderSpec,
    GridDocument,
    HorizontalAlign,
    VerticalAlign,
)
from sheetgrid.services.color_resolver import BLACK


@dataclass(frozen=True)
class CellPresentation:
    """Effective visual attributes of one rendered cell.

    The defaults describe a plain widget cell; callers pass their own
    instance when their defaults differ. ``None`` means the renderer decides.
    """

    background: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    text_color: str = BLACK
    font_size_px: float = 13.0
    font_family: str | None = None
    horizontal_align: HorizontalAlign | None = None
    vertical_align: VerticalAlign = VerticalAlign.BOTTOM
    wrap_text: bool = False
    rotation_deg: int = 0
    indent_px: int = 0
    border_top: BorderSpec | None = None
    border_right: BorderSpec | None = None
    border_bottom: BorderSpec | None = None
    border_left: BorderSpec | None = None


def apply_cell_style(
    document: GridDocument,
    row: int,
    col: int,
    defaults: CellPresentation,
) -> CellPresentation:
    """Return ``defaults`` with the cell's background and set style fields applied.

    Coordinates outside the document (rows or columns the widget appended
    after import) carry no overrides and get ``defaults`` back unchanged.
    """
    overrides: dict[str, object] = {}
    background = document.background_colors.get((row, col))
    if background is not None:
        overrides["background"] = background
    record = document.cell_styles.get((row, col))
    if record is not None:
        overrides.update(record.set_fields())
    if not overrides:
        return defaults
    return replace(defaults, **overrides)


def css_declarations(presentation: CellPresentation) -> dict[str, str]:
    """Render a presentation as CSS property/value pairs."""
    css: dict[str, str] = {}
    if presentation.background:
        css["background-color"] = presentation.background
    css["color"] = presentation.text_color
    css["font-weight"] = "bold" if presentation.bold else "normal"
    css["font-style"] = "italic" if presentation.italic else "normal"

    decorations = []
    if presentation.underline:
        decorations.append("underline")
    if presentation.strikethrough:
        decorations.append("line-through")
    css["text-decoration"] = " ".join(decorations) or "none"

    css["font-size"] = _px(presentation.font_size_px)
    if presentation.font_family:
        css["font-family"] = presentation.font_family
    if presentation.horizontal_align is not None:
        css["text-align"] = presentation.horizontal_align.value
    css["vertical-align"] = presentation.vertical_align.value
    css["white-space"] = "normal" if presentation.wrap_text else "nowrap"
    if presentation.rotation_deg:
        # CSS rotates clockwise; spreadsheet angles run counter-clockwise.
        css["transform"] = f"rotate({-presentation.rotation_deg}deg)"
    if presentation.indent_px:
        css["padding-left"] = _px(presentation.indent_px)

    for side in ("top", "right", "bottom", "left"):
        border: BorderSpec | None = getattr(presentation, f"border_{side}")
        if border is not None:
            css[f"border-{side}"] = (
                f"{_px(border.width_px)} {border.style.value} {border.color}"
            )
    return css


def css_text(presentation: CellPresentation) -> str:
    """Render a presentation as an inline ``style`` attribute value."""
    return "; ".join(
        f"{prop}: {value}" for prop, value in css_declarations(presentation).items()
    )


def _px(value: float) -> str:
    return f"{value:g}px"
