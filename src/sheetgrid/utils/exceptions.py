"""Centralized exception classes for the sheetgrid import engine.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details for consistent
error handling throughout the import pipeline.

Exception Hierarchy:
    SheetGridError (base)
    ├── FileError
    │   ├── FileTooLargeError
    │   └── UnsupportedFormatError
    ├── DecodeError
    │   └── SizingOverflowError
    ├── CellDegradation (non-fatal, absorbed per cell)
    └── ValidationError

Only DecodeError and SizingOverflowError abort an import. CellDegradation
is raised inside the per-cell normalization and extraction helpers and is
always absorbed by the degradation policy in services/degradation.py.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: File/upload errors
    - E4xxx: Decode/import errors
    - E9xxx: Internal/unexpected errors
    """

    # File errors (E1xxx)
    FILE_TOO_LARGE = "E1002"
    UNSUPPORTED_FORMAT = "E1003"
    FILE_READ_ERROR = "E1004"
    INVALID_INPUT = "E1007"

    # Decode/import errors (E4xxx)
    DECODE_FAILED = "E4101"
    NO_WORKSHEETS = "E4102"
    SHEET_NOT_FOUND = "E4103"
    SIZING_OVERFLOW = "E4104"
    CELL_DEGRADED = "E4105"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    UNEXPECTED_ERROR = "E9999"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class SheetGridError(Exception, HTTPStatusMixin):
    """Base exception for all sheetgrid errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# File Errors (E1xxx)
# =============================================================================


class FileError(SheetGridError):
    """Base class for upload/file errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_READ_ERROR,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending filename.

        Args:
            message: Error message.
            error_code: Error code.
            filename: Name of the uploaded file, when known.
            details: Additional details.
        """
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(message, error_code, details)
        self.filename = filename


class FileTooLargeError(FileError):
    """Raised when an upload exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            filename: Optional filename.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = (
            f"File size ({file_size} bytes) exceeds maximum "
            f"allowed size ({max_size} bytes)"
        )
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            filename=filename,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class UnsupportedFormatError(FileError):
    """Raised when the declared extension or MIME type is not a workbook."""

    http_status: int = 415

    def __init__(
        self,
        message: str,
        declared_type: str | None = None,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with format information.

        Args:
            message: Error message.
            declared_type: Extension or MIME type supplied by the caller.
            filename: Optional filename.
            details: Additional details.
        """
        details = details or {}
        if declared_type:
            details["declared_type"] = declared_type
        super().__init__(
            message=message,
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            filename=filename,
            details=details,
        )
        self.declared_type = declared_type


# =============================================================================
# Decode Errors (E4xxx)
# =============================================================================


class DecodeError(SheetGridError):
    """Raised when a buffer cannot be decoded into a worksheet.

    Fatal: the import is aborted and the failure surfaced to the user.
    """

    http_status: int = 422

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DECODE_FAILED,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the worksheet involved, if any.

        Args:
            message: Error message.
            error_code: Error code.
            sheet_name: Worksheet being decoded.
            details: Additional details.
        """
        details = details or {}
        if sheet_name:
            details["sheet_name"] = sheet_name
        super().__init__(message, error_code, details)
        self.sheet_name = sheet_name


class SizingOverflowError(DecodeError):
    """Raised when a worksheet would exceed the configured maximum cell count.

    Raised before any grid matrix is allocated.
    """

    http_status: int = 413

    def __init__(
        self,
        cell_count: int,
        max_cell_count: int,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with sizing information.

        Args:
            cell_count: Number of cells the grid would need.
            max_cell_count: Configured maximum.
            sheet_name: Worksheet being decoded.
            details: Additional details.
        """
        details = details or {}
        details["cell_count"] = cell_count
        details["max_cell_count"] = max_cell_count
        super().__init__(
            message=(
                f"Worksheet needs {cell_count} cells, which exceeds the "
                f"maximum of {max_cell_count}"
            ),
            error_code=ErrorCode.SIZING_OVERFLOW,
            sheet_name=sheet_name,
            details=details,
        )
        self.cell_count = cell_count
        self.max_cell_count = max_cell_count


class CellDegradation(SheetGridError):
    """A cell value or style could not be fully interpreted.

    Non-fatal. The caller substitutes a safe default and continues; these
    are counted in the import summary but never surfaced individually.
    """

    def __init__(
        self,
        message: str,
        aspect: str,
        row: int | None = None,
        col: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the degraded aspect and coordinate.

        Args:
            message: What could not be interpreted.
            aspect: Which part degraded (e.g. "value", "font", "border").
            row: 0-based row, when known.
            col: 0-based column, when known.
            details: Additional details.
        """
        details = details or {}
        details["aspect"] = aspect
        if row is not None:
            details["row"] = row
        if col is not None:
            details["col"] = col
        super().__init__(message, ErrorCode.CELL_DEGRADED, details)
        self.aspect = aspect
        self.row = row
        self.col = col


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SheetGridError):
    """General validation error for request input."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation details.

        Args:
            message: Main error message.
            field: Field that failed validation.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_INPUT,
            details=details,
        )
