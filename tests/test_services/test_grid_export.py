"""Tests for DataFrame and CSV export."""

from __future__ import annotations

import pandas as pd
import pytest

from sheetgrid.grid_document import EMPTY_CELL, CellValue, GridDocument
from sheetgrid.services.grid_export import populated_extent, to_csv, to_dataframe


def grid(rows: list[list[str]], row_count: int, col_count: int) -> GridDocument:
    cells = [[EMPTY_CELL] * col_count for _ in range(row_count)]
    for r, row in enumerate(rows):
        for c, display in enumerate(row):
            cells[r][c] = CellValue(display)
    return GridDocument(
        row_count=row_count,
        col_count=col_count,
        cells=tuple(tuple(row) for row in cells),
    )


@pytest.fixture
def kpi_grid() -> GridDocument:
    return grid(
        [
            ["Region", "Target", "Achieved"],
            ["North", "1500", "25.60%"],
            ["South", "", "Note, with comma"],
        ],
        row_count=8,
        col_count=6,
    )


class TestPopulatedExtent:
    def test_extent(self, kpi_grid: GridDocument) -> None:
        assert populated_extent(kpi_grid) == (3, 3)

    def test_empty(self) -> None:
        assert populated_extent(grid([], 5, 5)) == (0, 0)


class TestToDataFrame:
    def test_trimmed(self, kpi_grid: GridDocument) -> None:
        frame = to_dataframe(kpi_grid)

        assert frame.shape == (3, 3)
        assert frame.iloc[1, 2] == "25.60%"
        assert frame.iloc[2, 1] == ""
        assert all(dtype == pd.StringDtype() for dtype in frame.dtypes)

    def test_untrimmed(self, kpi_grid: GridDocument) -> None:
        assert to_dataframe(kpi_grid, trim=False).shape == (8, 6)

    def test_empty_grid(self) -> None:
        assert to_dataframe(grid([], 4, 4)).empty


class TestToCsv:
    def test_csv(self, kpi_grid: GridDocument) -> None:
        assert to_csv(kpi_grid) == (
            "Region,Target,Achieved\n"
            "North,1500,25.60%\n"
            'South,,"Note, with comma"\n'
        )

    def test_empty_grid(self) -> None:
        assert to_csv(grid([], 3, 3)) == ""
