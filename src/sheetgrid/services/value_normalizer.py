"""Turn raw cell content into ready-to-render display strings.

Number formats are honoured only as far as the grid needs them: the first
section of the pattern decides between percentage, currency/grouped,
scientific and fixed-decimal rendering. Output is locale-free: no grouping
separators or currency symbols are emitted, and the underlying number is
never altered beyond rounding for display.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from openpyxl.styles.numbers import is_date_format, is_timedelta_format
from openpyxl.utils.datetime import from_excel

from sheetgrid.grid_document import EMPTY_CELL, CellKind, CellValue
from sheetgrid.services.degradation import DegradationHandler, absorb
from sheetgrid.services.workbook_decoder import (
    ErrorValue,
    FormulaValue,
    RichTextValue,
)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
TIME_FORMAT = "%H:%M:%S"

CURRENCY_SYMBOLS = frozenset("$€£¥")


def normalize(
    raw_value: Any,
    number_format: str | None = None,
    on_degraded: DegradationHandler | None = None,
) -> CellValue:
    """Normalize a raw cell value to a :class:`CellValue`.

    Never raises: a value that cannot be interpreted degrades to its plain
    string form.
    """
    return absorb(
        "value",
        lambda: _normalize(raw_value, number_format),
        CellValue(display=_best_effort(raw_value)),
        on_degraded,
    )


def _normalize(raw_value: Any, number_format: str | None) -> CellValue:
    if raw_value is None:
        return EMPTY_CELL
    if isinstance(raw_value, FormulaValue):
        cached = raw_value.cached
        if cached is None:
            return CellValue(display="", kind=CellKind.FORMULA_RESULT)
        if isinstance(cached, ErrorValue):
            return CellValue(display=cached.code, kind=CellKind.ERROR)
        result = _normalize(cached, number_format)
        return CellValue(display=result.display, kind=CellKind.FORMULA_RESULT)
    if isinstance(raw_value, RichTextValue):
        return CellValue(display="".join(raw_value.runs), kind=CellKind.RICH_TEXT)
    if isinstance(raw_value, ErrorValue):
        return CellValue(display=raw_value.code, kind=CellKind.ERROR)
    if isinstance(raw_value, bool):
        return CellValue(display="TRUE" if raw_value else "FALSE")
    if isinstance(raw_value, (datetime, date, time, timedelta)):
        return CellValue(display=format_temporal(raw_value), kind=CellKind.DATE)
    if isinstance(raw_value, (int, float, Decimal)):
        if number_format and is_timedelta_format(number_format):
            duration = from_excel(raw_value, timedelta=True)
            return CellValue(display=format_temporal(duration), kind=CellKind.DATE)
        if number_format and is_date_format(number_format):
            return CellValue(
                display=format_temporal(from_excel(raw_value)), kind=CellKind.DATE
            )
        return CellValue(display=format_number(raw_value, number_format))
    if isinstance(raw_value, str):
        return CellValue(display=raw_value)
    return CellValue(display=_best_effort(raw_value))


def format_temporal(value: datetime | date | time | timedelta) -> str:
    """Render a date, time or duration in the fixed grid formats."""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime(DATE_FORMAT)
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, time):
        return value.strftime(TIME_FORMAT)
    total = round(value.total_seconds())
    sign = "-" if total < 0 else ""
    hours, remainder = divmod(abs(total), 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{sign}{hours}:{minutes:02d}:{seconds:02d}"


def format_number(value: int | float | Decimal, number_format: str | None) -> str:
    """Render a number according to the first section of ``number_format``."""
    if number_format is None or number_format.strip().lower() in ("", "general"):
        return plain_number(value)

    section = first_section(number_format)
    pattern = strip_literals(section)

    if "%" in pattern:
        percent = _to_decimal(value) * 100
        return _fixed(percent, zero_decimals(pattern)) + "%"

    upper = pattern.upper()
    if "E+" in upper or "E-" in upper:
        mantissa = upper.split("E")[0]
        return f"{float(value):.{zero_decimals(mantissa)}E}"

    if "," in pattern or "[$" in section or CURRENCY_SYMBOLS & set(pattern):
        return _fixed(_to_decimal(value), zero_decimals(pattern))

    if "0" in pattern:
        return _fixed(_to_decimal(value), zero_decimals(pattern))

    return plain_number(value)


def plain_number(value: int | float | Decimal) -> str:
    """Render a number without format, dropping a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def first_section(number_format: str) -> str:
    """Return the positive-number section of a format pattern."""
    in_quotes = False
    in_brackets = False
    for idx, char in enumerate(number_format):
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char == "[":
            in_brackets = True
        elif not in_quotes and char == "]":
            in_brackets = False
        elif char == ";" and not in_quotes and not in_brackets:
            return number_format[:idx]
    return number_format


def strip_literals(section: str) -> str:
    """Remove quoted text, bracketed tokens, escapes and padding directives."""
    result: list[str] = []
    chars = iter(section)
    for char in chars:
        if char == '"':
            for quoted in chars:
                if quoted == '"':
                    break
        elif char == "[":
            for bracketed in chars:
                if bracketed == "]":
                    break
        elif char in "\\_*":
            next(chars, None)
        else:
            result.append(char)
    return "".join(result)


def zero_decimals(pattern: str) -> int:
    """Count ``0`` placeholders immediately after the decimal point."""
    point = pattern.find(".")
    if point < 0:
        return 0
    count = 0
    for char in pattern[point + 1 :]:
        if char == "0":
            count += 1
        elif char != "#":
            break
    return count


def _to_decimal(value: int | float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _fixed(value: Decimal, decimals: int) -> str:
    quantized = value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    if quantized == 0:
        quantized = abs(quantized)
    return format(quantized, "f")


def _best_effort(raw_value: Any) -> str:
    if raw_value is None:
        return ""
    return str(raw_value)
