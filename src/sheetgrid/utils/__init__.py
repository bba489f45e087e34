"""Utilities package for sheetgrid.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from sheetgrid.utils.exceptions import (
    CellDegradation,
    DecodeError,
    ErrorCode,
    FileError,
    FileTooLargeError,
    HTTPStatusMixin,
    SheetGridError,
    SizingOverflowError,
    UnsupportedFormatError,
    ValidationError,
)
from sheetgrid.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "CellDegradation",
    "DecodeError",
    "ErrorCode",
    "FileError",
    "FileTooLargeError",
    "HTTPStatusMixin",
    "SheetGridError",
    "SizingOverflowError",
    "UnsupportedFormatError",
    "ValidationError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
