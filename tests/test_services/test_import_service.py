"""Tests for the workbook import orchestration."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from sheetgrid.config import Settings
from sheetgrid.services.import_service import GridImportService, ImportResult
from sheetgrid.utils.exceptions import (
    DecodeError,
    ErrorCode,
    FileError,
    FileTooLargeError,
    SizingOverflowError,
    UnsupportedFormatError,
)


@pytest.fixture
def service(test_settings: Settings) -> GridImportService:
    return GridImportService(test_settings)


class TestImportBytes:
    def test_successful_import(
        self, service: GridImportService, kpi_workbook_bytes: bytes
    ) -> None:
        result = service.import_bytes(kpi_workbook_bytes, filename="kpi.xlsx")

        assert isinstance(result, ImportResult)
        assert result.sheet_name == "KPI"
        assert result.sheet_names == ["KPI", "Notes"]
        assert result.filename == "kpi.xlsx"
        assert result.document.get_cell(2, 2).display == "25.60%"
        assert result.summary.merges == 1
        assert result.message == result.summary.message

    def test_second_sheet(
        self, service: GridImportService, kpi_workbook_bytes: bytes
    ) -> None:
        result = service.import_bytes(
            kpi_workbook_bytes, filename="kpi.xlsx", sheet_name="Notes"
        )
        assert result.sheet_name == "Notes"
        assert result.document.get_cell(0, 0).display == "Second sheet"

    def test_empty_workbook(
        self, service: GridImportService, empty_workbook_bytes: bytes
    ) -> None:
        result = service.import_bytes(empty_workbook_bytes, filename="blank.xlsx")

        assert (result.document.row_count, result.document.col_count) == (200, 50)
        assert result.summary.used_rows == 0
        assert result.message == (
            "Imported 0 rows: 0 merged regions, 0 colored cells, 0 styled cells"
        )

    def test_file_too_large(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = Settings(_env_file=None, max_file_size_mb=1)
        content = b"\0" * (1024 * 1024 + 1)

        with pytest.raises(FileTooLargeError) as exc_info:
            GridImportService(config).import_bytes(content, filename="big.xlsx")

        assert exc_info.value.details["max_size_bytes"] == 1024 * 1024

    def test_unsupported_extension(
        self, service: GridImportService, kpi_workbook_bytes: bytes
    ) -> None:
        with pytest.raises(UnsupportedFormatError):
            service.import_bytes(kpi_workbook_bytes, filename="kpi.ods")

    def test_garbage_content(self, service: GridImportService) -> None:
        with pytest.raises(DecodeError) as exc_info:
            service.import_bytes(b"PK but not really", filename="kpi.xlsx")
        assert exc_info.value.error_code == ErrorCode.DECODE_FAILED

    def test_grid_overflow(self, kpi_workbook_bytes: bytes) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = Settings(
                _env_file=None,
                floor_rows=10,
                floor_cols=10,
                grid_margin=10,
                max_cell_count=150,
            )

        with pytest.raises(SizingOverflowError):
            GridImportService(config).import_bytes(
                kpi_workbook_bytes, filename="kpi.xlsx"
            )


class TestImportLogging:
    def test_success_logged_once(
        self,
        service: GridImportService,
        kpi_workbook_bytes: bytes,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO):
            service.import_bytes(kpi_workbook_bytes, filename="kpi.xlsx")

        outcomes = [r for r in caplog.records if "Import completed" in r.getMessage()]
        assert len(outcomes) == 1
        assert outcomes[0].levelno == logging.INFO
        assert "success=True" in outcomes[0].getMessage()
        assert "merges=1" in outcomes[0].getMessage()

    def test_failure_logged_with_reason(
        self, service: GridImportService, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO), pytest.raises(DecodeError):
            service.import_bytes(b"nope", filename="kpi.xlsx")

        outcomes = [r for r in caplog.records if "Import completed" in r.getMessage()]
        assert len(outcomes) == 1
        assert outcomes[0].levelno == logging.ERROR
        assert "success=False" in outcomes[0].getMessage()
        assert "E4101" in outcomes[0].getMessage()


class TestImportPath:
    def test_reads_from_disk(
        self, service: GridImportService, kpi_workbook_bytes: bytes, tmp_path: Path
    ) -> None:
        path = tmp_path / "kpi.xlsx"
        path.write_bytes(kpi_workbook_bytes)

        result = service.import_path(path)

        assert result.filename == "kpi.xlsx"
        assert result.sheet_name == "KPI"

    def test_missing_file(self, service: GridImportService, tmp_path: Path) -> None:
        with pytest.raises(FileError, match="Workbook not found"):
            service.import_path(tmp_path / "missing.xlsx")
