"""Tests for the grid document dataclasses."""

from __future__ import annotations

import pytest

from sheetgrid.grid_document import (
    EMPTY_CELL,
    BorderSpec,
    CellKind,
    CellValue,
    GridDocument,
    LineStyle,
    MergeSpan,
    StyleRecord,
)


def blank(rows: int, cols: int) -> tuple[tuple[CellValue, ...], ...]:
    return tuple(tuple(EMPTY_CELL for _ in range(cols)) for _ in range(rows))


class TestCellValue:
    def test_default_kind_is_literal(self) -> None:
        assert CellValue("x").kind is CellKind.LITERAL

    def test_is_empty(self) -> None:
        assert EMPTY_CELL.is_empty
        assert not CellValue("0").is_empty


class TestStyleRecord:
    def test_set_fields_skips_unset(self) -> None:
        record = StyleRecord(bold=True, wrap_text=False)
        assert record.set_fields() == {"bold": True, "wrap_text": False}

    def test_empty(self) -> None:
        assert StyleRecord().is_empty()
        assert not StyleRecord(
            border_top=BorderSpec(1, LineStyle.SOLID, "#000000")
        ).is_empty()


class TestMergeSpan:
    def test_end_coordinates(self) -> None:
        span = MergeSpan(row=2, col=1, row_span=3, col_span=2)
        assert (span.end_row, span.end_col) == (4, 2)

    def test_contains(self) -> None:
        span = MergeSpan(0, 0, 2, 3)
        assert span.contains(1, 2)
        assert not span.contains(2, 0)

    @pytest.mark.parametrize(
        ("other", "expected"),
        [
            (MergeSpan(1, 1, 2, 2), True),
            (MergeSpan(0, 3, 1, 1), False),
            (MergeSpan(2, 0, 1, 5), False),
            (MergeSpan(1, 2, 1, 1), True),
        ],
    )
    def test_overlaps(self, other: MergeSpan, expected: bool) -> None:
        span = MergeSpan(0, 0, 2, 3)
        assert span.overlaps(other) is expected
        assert other.overlaps(span) is expected


class TestGridDocument:
    def test_shape_checked(self) -> None:
        with pytest.raises(ValueError, match="does not match 3x2"):
            GridDocument(row_count=3, col_count=2, cells=blank(2, 2))

    def test_get_cell(self) -> None:
        cells = (
            (CellValue("a"), CellValue("b")),
            (EMPTY_CELL, CellValue("=", CellKind.FORMULA_RESULT)),
        )
        document = GridDocument(row_count=2, col_count=2, cells=cells)

        assert document.get_cell(0, 1) == CellValue("b")
        assert document.get_cell(1, 1).kind is CellKind.FORMULA_RESULT

    @pytest.mark.parametrize(("row", "col"), [(-1, 0), (0, 2), (2, 0)])
    def test_get_cell_out_of_bounds(self, row: int, col: int) -> None:
        document = GridDocument(row_count=2, col_count=2, cells=blank(2, 2))
        with pytest.raises(IndexError):
            document.get_cell(row, col)

    def test_sparse_maps_are_read_only(self) -> None:
        backgrounds = {(0, 0): "#FF0000"}
        document = GridDocument(
            row_count=1, col_count=1, cells=blank(1, 1), background_colors=backgrounds
        )

        backgrounds[(0, 0)] = "#00FF00"

        assert document.background_colors[(0, 0)] == "#FF0000"
        with pytest.raises(TypeError):
            document.background_colors[(0, 0)] = "#0000FF"  # type: ignore[index]

    def test_merge_list_is_a_copy(self) -> None:
        document = GridDocument(
            row_count=2, col_count=2, cells=blank(2, 2), merges=(MergeSpan(0, 0, 1, 2),)
        )
        merges = document.get_merge_list()
        merges.clear()
        assert document.get_merge_list() == [MergeSpan(0, 0, 1, 2)]

    def test_display_matrix_and_populated(self) -> None:
        cells = ((CellValue("a"), EMPTY_CELL), (EMPTY_CELL, CellValue("d")))
        document = GridDocument(row_count=2, col_count=2, cells=cells)

        assert document.display_matrix() == [["a", ""], ["", "d"]]
        assert [(r, c) for r, c, _ in document.iter_populated()] == [(0, 0), (1, 1)]
