"""Pydantic models for import summaries and API responses."""

from typing import Any

from pydantic import BaseModel, Field

from sheetgrid.snapshot import GridSnapshot
from sheetgrid.utils.exceptions import ErrorCode


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class ImportSummary(BaseModel):
    """Counts reported once per successful import."""

    rows: int = Field(..., description="Grid row count, including margin")
    cols: int = Field(..., description="Grid column count, including margin")
    used_rows: int = Field(
        default=0, description="Rows spanned by populated or styled cells"
    )
    used_cols: int = Field(
        default=0, description="Columns spanned by populated or styled cells"
    )
    merges: int = Field(default=0, description="Merge spans kept")
    colored_cells: int = Field(
        default=0, description="Cells with a background override"
    )
    styled_cells: int = Field(default=0, description="Cells with a style record")
    degraded_cells: int = Field(
        default=0, description="Cells that fell back to safe defaults"
    )
    skipped_merges: int = Field(
        default=0, description="Declared merge regions that were dropped"
    )

    @property
    def message(self) -> str:
        """One-line confirmation shown to the user."""
        return (
            f"Imported {self.used_rows} rows: {self.merges} merged regions, "
            f"{self.colored_cells} colored cells, {self.styled_cells} styled cells"
        )


class ImportResponse(BaseModel):
    """Response model for the workbook import endpoint."""

    filename: str = Field(..., description="Original filename of the upload")
    sheet_name: str = Field(..., description="Worksheet that was imported")
    sheet_names: list[str] = Field(
        default_factory=list, description="All worksheets in the workbook"
    )
    message: str = Field(..., description="Human-readable import outcome")
    summary: ImportSummary = Field(..., description="Import counts")
    snapshot: GridSnapshot = Field(..., description="Imported grid document")


class ErrorDetail(BaseModel):
    """Error detail model for API error responses.

    This model provides structured error responses with:
    - Human-readable error message
    - Machine-readable error code
    - Optional additional details for debugging
    - Optional request ID for correlation
    """

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E4101')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value."""
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )
