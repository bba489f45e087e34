"""Tests for background and style extraction."""

from __future__ import annotations

import pytest

from sheetgrid.grid_document import (
    BorderSpec,
    HorizontalAlign,
    LineStyle,
    StyleRecord,
    VerticalAlign,
)
from sheetgrid.services.color_resolver import DirectColor, IndexedColor, ThemeColor
from sheetgrid.services.style_extractor import (
    StyleExtraction,
    border_spec,
    extract,
    extract_background,
    points_to_pixels,
    rotation_degrees,
)
from sheetgrid.services.workbook_decoder import (
    RawAlignment,
    RawBorderSide,
    RawFill,
    RawFont,
    RawStyle,
)
from sheetgrid.utils.exceptions import CellDegradation


class TestBackground:
    def test_no_style_means_no_background(self) -> None:
        assert extract(None) == StyleExtraction()

    def test_pattern_foreground_wins(self) -> None:
        fill = RawFill(
            pattern_fg=DirectColor("FF1F4E78"), pattern_bg=IndexedColor(64)
        )
        assert extract_background(fill) == "#1F4E78"

    def test_falls_through_unresolvable_descriptors(self) -> None:
        fill = RawFill(pattern_fg=IndexedColor(9999), pattern_bg=ThemeColor(7))
        assert extract_background(fill) == "#FFC000"

    def test_legacy_slots_used_last(self) -> None:
        fill = RawFill(legacy_bg=None, legacy_fg=DirectColor("00FF00"))
        assert extract_background(fill) == "#00FF00"

    def test_empty_fill(self) -> None:
        assert extract_background(RawFill()) is None
        assert extract_background(None) is None


class TestFont:
    def test_flags_only_set_when_true(self) -> None:
        style = extract(RawStyle(font=RawFont(bold=True, underline="single"))).style
        assert style.bold is True
        assert style.underline is True
        assert style.italic is None
        assert style.strikethrough is None

    def test_underline_none_is_unset(self) -> None:
        assert extract(RawStyle(font=RawFont(underline="none"))).style.underline is None

    def test_size_converted_to_pixels(self) -> None:
        style = extract(RawStyle(font=RawFont(size_pt=15, name="Calibri"))).style
        assert style.font_size_px == 20.0
        assert style.font_family == "Calibri"

    def test_points_to_pixels_rounds(self) -> None:
        assert points_to_pixels(11) == 14.67

    def test_default_black_text_is_omitted(self) -> None:
        style = extract(RawStyle(font=RawFont(color=ThemeColor(1)))).style
        assert style.text_color is None

    def test_colored_text_kept(self) -> None:
        style = extract(RawStyle(font=RawFont(color=DirectColor("00FFFFFF")))).style
        assert style.text_color == "#FFFFFF"


class TestAlignment:
    @pytest.mark.parametrize(
        ("stored", "expected"),
        [
            ("left", HorizontalAlign.LEFT),
            ("center", HorizontalAlign.CENTER),
            ("centerContinuous", HorizontalAlign.CENTER),
            ("right", HorizontalAlign.RIGHT),
            ("distributed", HorizontalAlign.JUSTIFY),
            ("sideways", HorizontalAlign.LEFT),
        ],
    )
    def test_horizontal_mapping(self, stored: str, expected: HorizontalAlign) -> None:
        style = extract(RawStyle(alignment=RawAlignment(horizontal=stored))).style
        assert style.horizontal_align == expected

    def test_general_alignment_is_unset(self) -> None:
        style = extract(RawStyle(alignment=RawAlignment(horizontal="general"))).style
        assert style.horizontal_align is None

    def test_vertical_center_is_middle(self) -> None:
        style = extract(RawStyle(alignment=RawAlignment(vertical="center"))).style
        assert style.vertical_align == VerticalAlign.MIDDLE

    def test_wrap_copied_when_present(self) -> None:
        assert extract(
            RawStyle(alignment=RawAlignment(wrap_text=False))
        ).style.wrap_text is False
        assert extract(RawStyle(alignment=RawAlignment())).style.wrap_text is None

    def test_indent_in_pixels(self) -> None:
        style = extract(RawStyle(alignment=RawAlignment(indent=2))).style
        assert style.indent_px == 16

    def test_rotation(self) -> None:
        style = extract(RawStyle(alignment=RawAlignment(text_rotation=135))).style
        assert style.rotation_deg == -45

    @pytest.mark.parametrize(
        ("stored", "expected"), [(0, 0), (45, 45), (90, 90), (91, -1), (180, -90)]
    )
    def test_rotation_degrees(self, stored: int, expected: int) -> None:
        assert rotation_degrees(stored) == expected

    @pytest.mark.parametrize("stored", [255, 181, -5])
    def test_unrepresentable_rotation_raises(self, stored: int) -> None:
        with pytest.raises(CellDegradation):
            rotation_degrees(stored)


class TestBorders:
    def test_thin_border_without_color_is_black(self) -> None:
        assert border_spec(RawBorderSide("thin")) == BorderSpec(
            1, LineStyle.SOLID, "#000000"
        )

    @pytest.mark.parametrize(
        ("stored", "width", "line"),
        [
            ("medium", 2, LineStyle.SOLID),
            ("thick", 3, LineStyle.SOLID),
            ("dashed", 1, LineStyle.DASHED),
            ("mediumDashDot", 2, LineStyle.DASHED),
            ("dotted", 1, LineStyle.DOTTED),
            ("double", 3, LineStyle.DOUBLE),
            ("hair", 0.5, LineStyle.SOLID),
            ("unheard-of", 1, LineStyle.SOLID),
        ],
    )
    def test_style_mapping(self, stored: str, width: float, line: LineStyle) -> None:
        spec = border_spec(RawBorderSide(stored, DirectColor("FF0000")))
        assert (spec.width_px, spec.style, spec.color) == (width, line, "#FF0000")

    def test_sides_land_on_their_fields(self) -> None:
        raw = RawStyle(
            borders={"bottom": RawBorderSide("thin"), "left": RawBorderSide("thick")}
        )
        style = extract(raw).style
        assert style.border_bottom is not None
        assert style.border_left is not None
        assert style.border_left.width_px == 3
        assert style.border_top is None
        assert style.border_right is None


class TestDegradation:
    def test_stacked_text_rotation_degrades_only_rotation(self) -> None:
        seen: list[CellDegradation] = []
        raw = RawStyle(
            font=RawFont(bold=True),
            alignment=RawAlignment(horizontal="right", text_rotation=255),
        )

        style = extract(raw, seen.append).style

        assert style.rotation_deg is None
        assert style.horizontal_align == HorizontalAlign.RIGHT
        assert style.bold is True
        assert [d.aspect for d in seen] == ["rotation"]

    def test_broken_font_keeps_other_aspects(self) -> None:
        seen: list[CellDegradation] = []
        raw = RawStyle(
            font=RawFont(bold=True, size_pt="large"),  # type: ignore[arg-type]
            fill=RawFill(pattern_fg=DirectColor("FFFF00")),
            alignment=RawAlignment(vertical="top"),
        )

        extraction = extract(raw, seen.append)

        assert extraction.background == "#FFFF00"
        assert extraction.style == StyleRecord(vertical_align=VerticalAlign.TOP)
        assert [d.aspect for d in seen] == ["font"]

    def test_empty_style_yields_empty_record(self) -> None:
        extraction = extract(RawStyle())
        assert extraction.background is None
        assert extraction.style.is_empty()
