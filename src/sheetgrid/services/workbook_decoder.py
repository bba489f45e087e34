"""Decode OOXML workbooks into raw cells, raw styles and merge regions."""

from __future__ import annotations

import zipfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from io import BytesIO
from pathlib import PurePath
from typing import Any

from openpyxl import load_workbook
from openpyxl.cell.rich_text import CellRichText
from openpyxl.styles import GradientFill, PatternFill
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from sheetgrid.config import settings
from sheetgrid.services.color_resolver import (
    ColorDescriptor,
    descriptor_from_openpyxl,
)
from sheetgrid.utils.exceptions import (
    DecodeError,
    ErrorCode,
    SizingOverflowError,
    UnsupportedFormatError,
)
from sheetgrid.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "EXTENSION_TO_MIME",
    "SUPPORTED_MIME_TYPES",
    "DecodedSheet",
    "ErrorValue",
    "FormulaValue",
    "RawAlignment",
    "RawBorderSide",
    "RawCell",
    "RawFill",
    "RawFont",
    "RawStyle",
    "RichTextValue",
    "WorkbookDecoder",
]

# Spreadsheet containers openpyxl can read.
EXTENSION_TO_MIME: dict[str, str] = {
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xlsm": "application/vnd.ms-excel.sheet.macroEnabled.12",
    ".xltx": "application/vnd.openxmlformats-officedocument.spreadsheetml.template",
    ".xltm": "application/vnd.ms-excel.template.macroEnabled.12",
}

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(EXTENSION_TO_MIME.values())

# File pickers often send these for any binary upload.
GENERIC_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/octet-stream",
        "application/zip",
        "application/x-zip-compressed",
    }
)

BORDER_SIDES = ("top", "right", "bottom", "left")


# --------------------------------------------------------------------------- #
# Raw values
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ErrorValue:
    """A spreadsheet error such as ``#DIV/0!``."""

    code: str


@dataclass(frozen=True)
class FormulaValue:
    """A formula and the result cached by the application that saved it."""

    formula: str
    cached: Any = None


@dataclass(frozen=True)
class RichTextValue:
    """Ordered text runs of a rich-text cell; run formatting is dropped."""

    runs: tuple[str, ...]


RawValue = (
    None
    | str
    | int
    | float
    | Decimal
    | bool
    | datetime
    | date
    | time
    | timedelta
    | FormulaValue
    | RichTextValue
    | ErrorValue
)


# --------------------------------------------------------------------------- #
# Raw styles
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class RawFont:
    bold: bool = False
    italic: bool = False
    underline: str | None = None
    strikethrough: bool = False
    color: ColorDescriptor | None = None
    size_pt: float | None = None
    name: str | None = None


@dataclass(frozen=True)
class RawFill:
    """Fill colors in background lookup order.

    Pattern fills populate the ``pattern_*`` slots; gradient fills populate
    the legacy slots from their first and last stop.
    """

    pattern_fg: ColorDescriptor | None = None
    pattern_bg: ColorDescriptor | None = None
    legacy_bg: ColorDescriptor | None = None
    legacy_fg: ColorDescriptor | None = None


@dataclass(frozen=True)
class RawAlignment:
    horizontal: str | None = None
    vertical: str | None = None
    wrap_text: bool | None = None
    text_rotation: int | None = None
    indent: float | None = None


@dataclass(frozen=True)
class RawBorderSide:
    style: str
    color: ColorDescriptor | None = None


@dataclass(frozen=True)
class RawStyle:
    """Style descriptor of one cell, colors already classified."""

    font: RawFont | None = None
    fill: RawFill | None = None
    alignment: RawAlignment | None = None
    borders: dict[str, RawBorderSide] = field(default_factory=dict)


@dataclass(frozen=True)
class RawCell:
    """One decoded cell; ``row`` and ``col`` are 0-based."""

    row: int
    col: int
    value: RawValue
    number_format: str | None = None
    style: RawStyle | None = None


@dataclass
class DecodedSheet:
    """A worksheet ready for assembly.

    Declared extents are advisory. ``merges`` holds 0-based inclusive
    ``(start_row, start_col, end_row, end_col)`` regions in reading order.
    """

    sheet_name: str
    sheet_names: list[str]
    declared_rows: int
    declared_cols: int
    merges: list[tuple[int, int, int, int]]
    _cell_source: Callable[[], Iterator[RawCell]] = field(repr=False)

    def iter_cells(self) -> Iterator[RawCell]:
        """Yield every cell holding a value or a style, row by row."""
        return self._cell_source()


# --------------------------------------------------------------------------- #
# Decoder
# --------------------------------------------------------------------------- #


class WorkbookDecoder:
    """Decode workbook bytes into a :class:`DecodedSheet` using openpyxl."""

    def __init__(self, max_cell_count: int | None = None) -> None:
        self.max_cell_count = (
            max_cell_count if max_cell_count is not None else settings.max_cell_count
        )

    def decode(
        self,
        content: bytes,
        filename: str | None = None,
        mime_type: str | None = None,
        sheet_name: str | None = None,
    ) -> DecodedSheet:
        """Decode one worksheet of a workbook.

        Args:
            content: Raw file bytes.
            filename: Name supplied by the uploader, used for its extension.
            mime_type: MIME type supplied by the uploader.
            sheet_name: Worksheet to decode; the first worksheet when omitted.

        Raises:
            UnsupportedFormatError: If the declared type is not a workbook.
            DecodeError: If the buffer cannot be read, has no worksheets or
                lacks the requested sheet.
            SizingOverflowError: If the sheet's extent exceeds the maximum
                cell count. Checked on a streamed read before the workbook
                is loaded.
        """
        self._check_declared_type(filename, mime_type)
        if not zipfile.is_zipfile(BytesIO(content)):
            raise DecodeError(
                "File is not a valid spreadsheet container",
                details={"filename": filename} if filename else None,
            )

        # Size the sheet from a streamed read before anything is materialized
        self._check_extent(content, sheet_name, filename)

        # Load twice: once for formulas and rich text, once for cached results
        workbook = self._load(content, data_only=False, filename=filename)
        computed_wb = self._load(content, data_only=True, filename=filename)

        worksheet = self._select_sheet(workbook, sheet_name)
        computed_ws = computed_wb[worksheet.title]

        declared_rows = worksheet.max_row
        declared_cols = worksheet.max_column

        merges = sorted(
            (r.min_row - 1, r.min_col - 1, r.max_row - 1, r.max_col - 1)
            for r in worksheet.merged_cells.ranges
        )

        logger.debug(
            "Workbook decoded",
            sheet=worksheet.title,
            declared_rows=declared_rows,
            declared_cols=declared_cols,
            merges=len(merges),
        )

        return DecodedSheet(
            sheet_name=worksheet.title,
            sheet_names=list(workbook.sheetnames),
            declared_rows=declared_rows,
            declared_cols=declared_cols,
            merges=merges,
            _cell_source=lambda: self._iter_cells(worksheet, computed_ws),
        )

    def get_sheet_names(self, content: bytes) -> list[str]:
        """List the worksheet names of a workbook."""
        workbook = self._load(content, data_only=False, filename=None)
        return [ws.title for ws in workbook.worksheets]

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _check_declared_type(filename: str | None, mime_type: str | None) -> None:
        if filename:
            extension = PurePath(filename).suffix.lower()
            if extension not in EXTENSION_TO_MIME:
                raise UnsupportedFormatError(
                    f"Unsupported file extension: {extension or '(none)'}",
                    declared_type=extension or None,
                    filename=filename,
                )
        if mime_type:
            base_type = mime_type.split(";")[0].strip().lower()
            if (
                base_type not in SUPPORTED_MIME_TYPES
                and base_type not in GENERIC_MIME_TYPES
            ):
                raise UnsupportedFormatError(
                    f"Unsupported MIME type: {base_type}",
                    declared_type=base_type,
                    filename=filename,
                )

    def _check_extent(
        self, content: bytes, sheet_name: str | None, filename: str | None
    ) -> None:
        """Raise before a full load when the sheet's extent exceeds the limit.

        The dimension tag written by the producing application is ignored;
        rows are streamed in read-only mode and the scan stops as soon as
        the extent seen so far is over the limit.
        """
        workbook = self._load(
            content, data_only=False, filename=filename, read_only=True
        )
        try:
            worksheet = self._select_sheet(workbook, sheet_name)
            worksheet.reset_dimensions()
            rows = cols = 0
            for row_number, row_cells in enumerate(worksheet.iter_rows(), start=1):
                if not row_cells:
                    continue
                rows = row_number
                cols = max(cols, row_cells[-1].column)
                if rows * cols > self.max_cell_count:
                    raise SizingOverflowError(
                        rows * cols, self.max_cell_count, sheet_name=worksheet.title
                    )
        finally:
            workbook.close()

    @staticmethod
    def _load(
        content: bytes,
        *,
        data_only: bool,
        filename: str | None,
        read_only: bool = False,
    ) -> Workbook:
        try:
            return load_workbook(
                BytesIO(content),
                read_only=read_only,
                data_only=data_only,
                rich_text=True,
            )
        except (
            zipfile.BadZipFile,
            InvalidFileException,
            KeyError,
            ValueError,
            TypeError,
            OSError,
        ) as exc:
            raise DecodeError(
                f"Failed to read workbook: {exc}",
                details={"filename": filename} if filename else None,
            ) from exc

    @staticmethod
    def _select_sheet(workbook: Workbook, sheet_name: str | None) -> Worksheet:
        worksheets = workbook.worksheets
        if not worksheets:
            raise DecodeError(
                "Workbook contains no worksheets", error_code=ErrorCode.NO_WORKSHEETS
            )
        if sheet_name is None:
            return worksheets[0]
        for worksheet in worksheets:
            if worksheet.title == sheet_name:
                return worksheet
        raise DecodeError(
            f"Sheet '{sheet_name}' not found in workbook",
            error_code=ErrorCode.SHEET_NOT_FOUND,
            sheet_name=sheet_name,
            details={"available_sheets": [ws.title for ws in worksheets]},
        )

    def _iter_cells(
        self, worksheet: Worksheet, computed_ws: Worksheet
    ) -> Iterator[RawCell]:
        style_cache: dict[int, RawStyle] = {}
        for row_cells in worksheet.iter_rows():
            for cell in row_cells:
                style = self._cell_style(cell, style_cache)
                value = self._cell_value(cell, computed_ws)
                if value is None and style is None:
                    continue
                yield RawCell(
                    row=cell.row - 1,
                    col=cell.column - 1,
                    value=value,
                    number_format=cell.number_format,
                    style=style,
                )

    @staticmethod
    def _cell_value(cell: Any, computed_ws: Worksheet) -> RawValue:
        value = cell.value
        if value is None:
            return None
        if cell.data_type == "f":
            formula = value.text if hasattr(value, "text") else str(value)
            computed = computed_ws.cell(row=cell.row, column=cell.column)
            cached = computed.value
            if cached is not None and computed.data_type == "e":
                cached = ErrorValue(str(cached))
            return FormulaValue(formula=formula or "", cached=cached)
        if cell.data_type == "e":
            return ErrorValue(str(value))
        if isinstance(value, CellRichText):
            return RichTextValue(
                tuple(run if isinstance(run, str) else run.text for run in value)
            )
        return value

    def _cell_style(
        self, cell: Any, style_cache: dict[int, RawStyle]
    ) -> RawStyle | None:
        if not cell.has_style:
            return None
        style_id = cell.style_id
        if style_id not in style_cache:
            style_cache[style_id] = self._build_style(cell)
        return style_cache[style_id]

    @staticmethod
    def _build_style(cell: Any) -> RawStyle:
        font = cell.font
        raw_font = None
        if font is not None:
            raw_font = RawFont(
                bold=bool(font.b),
                italic=bool(font.i),
                underline=font.u,
                strikethrough=bool(font.strike),
                color=descriptor_from_openpyxl(font.color),
                size_pt=font.sz,
                name=font.name,
            )

        fill = cell.fill
        raw_fill = None
        if isinstance(fill, PatternFill) and fill.fill_type:
            raw_fill = RawFill(
                pattern_fg=descriptor_from_openpyxl(fill.fgColor),
                pattern_bg=descriptor_from_openpyxl(fill.bgColor),
            )
        elif isinstance(fill, GradientFill) and fill.stop:
            raw_fill = RawFill(
                legacy_bg=descriptor_from_openpyxl(fill.stop[0].color),
                legacy_fg=descriptor_from_openpyxl(fill.stop[-1].color),
            )

        alignment = cell.alignment
        raw_alignment = None
        if alignment is not None:
            raw_alignment = RawAlignment(
                horizontal=alignment.horizontal,
                vertical=alignment.vertical,
                wrap_text=alignment.wrap_text,
                text_rotation=alignment.textRotation,
                indent=alignment.indent,
            )

        borders: dict[str, RawBorderSide] = {}
        border = cell.border
        if border is not None:
            for side_name in BORDER_SIDES:
                side = getattr(border, side_name, None)
                if side is not None and side.style:
                    borders[side_name] = RawBorderSide(
                        style=side.style, color=descriptor_from_openpyxl(side.color)
                    )

        return RawStyle(
            font=raw_font, fill=raw_fill, alignment=raw_alignment, borders=borders
        )
