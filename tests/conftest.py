from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from datetime import datetime
from io import BytesIO
from unittest.mock import patch

import pytest
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from sheetgrid.config import Settings
from sheetgrid.services.workbook_decoder import DecodedSheet, RawCell


def workbook_bytes(wb: Workbook) -> bytes:
    """Serialize a workbook to xlsx bytes."""
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_decoded(
    cells: Iterable[RawCell] = (),
    merges: list[tuple[int, int, int, int]] | None = None,
    sheet_name: str = "Sheet1",
) -> DecodedSheet:
    """Build a DecodedSheet without going through openpyxl."""
    cell_list = list(cells)
    return DecodedSheet(
        sheet_name=sheet_name,
        sheet_names=[sheet_name],
        declared_rows=max((c.row + 1 for c in cell_list), default=0),
        declared_cols=max((c.col + 1 for c in cell_list), default=0),
        merges=merges or [],
        _cell_source=lambda: iter(cell_list),
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults only, ignoring the environment and .env files."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(_env_file=None)


@pytest.fixture
def small_settings() -> Settings:
    """Settings with a small grid floor, handy for exact-size assertions."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(
            _env_file=None,
            floor_rows=5,
            floor_cols=4,
            grid_margin=2,
            max_cell_count=400,
        )


@pytest.fixture
def make_workbook_bytes() -> Callable[[Workbook], bytes]:
    return workbook_bytes


@pytest.fixture
def make_decoded() -> Callable[..., DecodedSheet]:
    return build_decoded


@pytest.fixture
def empty_workbook_bytes() -> bytes:
    return workbook_bytes(Workbook())


@pytest.fixture
def kpi_workbook() -> Workbook:
    """A small KPI board with values, formats, styles and merges."""
    wb = Workbook()
    ws = wb.active
    ws.title = "KPI"

    ws["A1"] = "KPI Board 2024"
    ws.merge_cells("A1:C1")
    ws["A1"].font = Font(bold=True, size=15, color="FFFFFF")
    ws["A1"].fill = PatternFill("solid", fgColor="1F4E78")
    ws["A1"].alignment = Alignment(horizontal="center", vertical="center")

    ws["A2"] = "Region"
    ws["B2"] = "Target"
    ws["C2"] = "Achieved"
    for cell in ws[2]:
        cell.border = Border(bottom=Side(style="thin"))

    ws["A3"] = "North"
    ws["B3"] = 1500
    ws["C3"] = 0.256
    ws["C3"].number_format = "0.00%"
    ws["C3"].fill = PatternFill("solid", fgColor="FFFF00")

    ws["A4"] = "South"
    ws["B4"] = 1234.5
    ws["B4"].number_format = "#,##0.00"
    ws["C4"] = "=B4/B3"
    ws["D4"] = datetime(2024, 1, 15)
    ws["E4"] = True
    ws["F4"] = "#DIV/0!"
    ws["A5"].fill = PatternFill("solid", fgColor="FFFFFF")

    wb.create_sheet("Notes")["A1"] = "Second sheet"
    return wb


@pytest.fixture
def kpi_workbook_bytes(kpi_workbook: Workbook) -> bytes:
    return workbook_bytes(kpi_workbook)
