"""Tests for layering cell styles over widget defaults."""

from __future__ import annotations

from dataclasses import replace

import pytest

from sheetgrid.grid_document import (
    EMPTY_CELL,
    BorderSpec,
    GridDocument,
    HorizontalAlign,
    LineStyle,
    StyleRecord,
    VerticalAlign,
)
from sheetgrid.services.style_pipeline import (
    CellPresentation,
    apply_cell_style,
    css_declarations,
    css_text,
)


@pytest.fixture
def document() -> GridDocument:
    return GridDocument(
        row_count=3,
        col_count=3,
        cells=tuple(tuple(EMPTY_CELL for _ in range(3)) for _ in range(3)),
        background_colors={(0, 0): "#1F4E78", (2, 2): "#FFFF00"},
        cell_styles={
            (0, 0): StyleRecord(
                bold=True,
                text_color="#FFFFFF",
                font_size_px=20.0,
                horizontal_align=HorizontalAlign.CENTER,
            ),
            (1, 1): StyleRecord(
                italic=True,
                border_bottom=BorderSpec(1, LineStyle.SOLID, "#000000"),
            ),
        },
    )


class TestApplyCellStyle:
    def test_defaults_for_plain_cell(self, document: GridDocument) -> None:
        defaults = CellPresentation()
        assert apply_cell_style(document, 0, 1, defaults) is defaults

    def test_background_and_record_layered(self, document: GridDocument) -> None:
        presentation = apply_cell_style(document, 0, 0, CellPresentation())

        assert presentation.background == "#1F4E78"
        assert presentation.bold is True
        assert presentation.text_color == "#FFFFFF"
        assert presentation.font_size_px == 20.0
        assert presentation.horizontal_align == HorizontalAlign.CENTER
        assert presentation.italic is False
        assert presentation.vertical_align == VerticalAlign.BOTTOM

    def test_unset_fields_follow_widget_defaults(self, document: GridDocument) -> None:
        defaults = CellPresentation(font_size_px=16.0, font_family="Inter")

        presentation = apply_cell_style(document, 1, 1, defaults)

        assert presentation.italic is True
        assert presentation.font_size_px == 16.0
        assert presentation.font_family == "Inter"

    def test_background_only(self, document: GridDocument) -> None:
        presentation = apply_cell_style(document, 2, 2, CellPresentation())
        assert presentation == replace(CellPresentation(), background="#FFFF00")

    def test_every_record_field_is_applied(self) -> None:
        record = StyleRecord(
            bold=True,
            italic=True,
            underline=True,
            strikethrough=True,
            text_color="#FF0000",
            font_size_px=18.0,
            font_family="Calibri",
            horizontal_align=HorizontalAlign.RIGHT,
            vertical_align=VerticalAlign.TOP,
            wrap_text=True,
            rotation_deg=45,
            indent_px=18,
            border_top=BorderSpec(1, LineStyle.SOLID, "#000000"),
            border_right=BorderSpec(2, LineStyle.DASHED, "#000000"),
            border_bottom=BorderSpec(3, LineStyle.DOUBLE, "#000000"),
            border_left=BorderSpec(0.5, LineStyle.DOTTED, "#000000"),
        )
        single = GridDocument(
            row_count=1,
            col_count=1,
            cells=((EMPTY_CELL,),),
            cell_styles={(0, 0): record},
        )

        presentation = apply_cell_style(single, 0, 0, CellPresentation())

        for name, value in record.set_fields().items():
            assert getattr(presentation, name) == value

    def test_document_method_delegates(self, document: GridDocument) -> None:
        assert document.get_style_for(0, 0).background == "#1F4E78"
        assert document.get_style_for(0, 0, CellPresentation(bold=False)).bold is True

    def test_outside_document_returns_defaults(self, document: GridDocument) -> None:
        defaults = CellPresentation(font_size_px=18.0)
        assert document.get_style_for(250, 70, defaults) == defaults

    def test_repeated_application_is_stable(self, document: GridDocument) -> None:
        first = apply_cell_style(document, 0, 0, CellPresentation())
        again = apply_cell_style(document, 0, 0, first)
        assert again == first


class TestCss:
    def test_plain_defaults(self) -> None:
        assert css_declarations(CellPresentation()) == {
            "color": "#000000",
            "font-weight": "normal",
            "font-style": "normal",
            "text-decoration": "none",
            "font-size": "13px",
            "vertical-align": "bottom",
            "white-space": "nowrap",
        }

    def test_styled_cell(self, document: GridDocument) -> None:
        css = css_declarations(document.get_style_for(0, 0))

        assert css["background-color"] == "#1F4E78"
        assert css["color"] == "#FFFFFF"
        assert css["font-weight"] == "bold"
        assert css["font-size"] == "20px"
        assert css["text-align"] == "center"

    def test_borders(self, document: GridDocument) -> None:
        css = css_declarations(document.get_style_for(1, 1))
        assert css["border-bottom"] == "1px solid #000000"
        assert "border-top" not in css

    def test_decorations_rotation_and_indent(self) -> None:
        presentation = CellPresentation(
            underline=True,
            strikethrough=True,
            rotation_deg=45,
            indent_px=16,
            wrap_text=True,
            font_size_px=14.67,
        )

        css = css_declarations(presentation)

        assert css["text-decoration"] == "underline line-through"
        assert css["transform"] == "rotate(-45deg)"
        assert css["padding-left"] == "16px"
        assert css["white-space"] == "normal"
        assert css["font-size"] == "14.67px"

    def test_css_text(self) -> None:
        text = css_text(CellPresentation(bold=True))
        assert text.startswith("color: #000000; font-weight: bold;")
