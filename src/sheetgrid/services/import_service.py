"""Workbook import orchestration.

One call per user action: validate the upload, decode the worksheet,
assemble the grid and report a single success/failure outcome. The
document is only returned once assembly has completed, so an aborted or
failed import leaves nothing behind.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path

from sheetgrid.config import Settings, settings
from sheetgrid.grid_document import GridDocument
from sheetgrid.models import ImportSummary
from sheetgrid.services.grid_assembler import GridAssembler
from sheetgrid.services.workbook_decoder import WorkbookDecoder
from sheetgrid.utils.exceptions import FileError, FileTooLargeError, SheetGridError
from sheetgrid.utils.logging import LogContext, get_logger, timed_operation

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a successful import."""

    document: GridDocument
    summary: ImportSummary
    sheet_name: str
    sheet_names: list[str] = field(default_factory=list)
    filename: str | None = None

    @property
    def message(self) -> str:
        return self.summary.message


class GridImportService:
    """Import workbooks into grid documents."""

    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings
        self.decoder = WorkbookDecoder(max_cell_count=self.config.max_cell_count)
        self.assembler = GridAssembler(self.config)

    def import_bytes(
        self,
        content: bytes,
        filename: str | None = None,
        mime_type: str | None = None,
        sheet_name: str | None = None,
    ) -> ImportResult:
        """Import one worksheet from an uploaded workbook.

        Args:
            content: Raw file bytes.
            filename: Uploaded filename; its extension must be a workbook type.
            mime_type: Declared MIME type, if the uploader supplied one.
            sheet_name: Worksheet to import; the first one when omitted.

        Returns:
            ImportResult with the assembled document and its summary.

        Raises:
            FileTooLargeError: If the upload exceeds ``max_file_size_mb``.
            UnsupportedFormatError: If the declared type is not a workbook.
            DecodeError: If the workbook cannot be decoded.
            SizingOverflowError: If the grid exceeds ``max_cell_count``.
        """
        display_name = filename or "upload"
        import_id = str(uuid.uuid4())

        with LogContext(import_id=import_id, filename=display_name):
            logger.info(
                "Starting import",
                size_bytes=len(content),
                sheet=sheet_name or "(first)",
            )
            try:
                with timed_operation(logger, "import") as metrics:
                    self._check_size(content, filename)
                    decoded = self.decoder.decode(
                        content,
                        filename=filename,
                        mime_type=mime_type,
                        sheet_name=sheet_name,
                    )
                    assembled = self.assembler.assemble(decoded)
                    summary = assembled.summary
                    metrics.cells_processed = summary.rows * summary.cols
                    metrics.merges_processed = summary.merges
                    metrics.cells_degraded = summary.degraded_cells
            except SheetGridError as exc:
                logger.log_import_result(
                    filename=display_name,
                    success=False,
                    duration_seconds=metrics.duration_seconds,
                    error_message=str(exc),
                )
                raise

            logger.log_import_result(
                filename=display_name,
                success=True,
                duration_seconds=metrics.duration_seconds,
                rows=summary.rows,
                cols=summary.cols,
                merges=summary.merges,
                colored_cells=summary.colored_cells,
                styled_cells=summary.styled_cells,
                degraded_cells=summary.degraded_cells,
            )

        return ImportResult(
            document=assembled.document,
            summary=summary,
            sheet_name=decoded.sheet_name,
            sheet_names=decoded.sheet_names,
            filename=filename,
        )

    def import_path(
        self, file_path: Path | str, sheet_name: str | None = None
    ) -> ImportResult:
        """Import a workbook from disk.

        Raises:
            FileError: If the file does not exist or cannot be read.
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileError(f"Workbook not found: {path}", filename=path.name)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FileError(
                f"Failed to read workbook: {exc}", filename=path.name
            ) from exc
        return self.import_bytes(content, filename=path.name, sheet_name=sheet_name)

    def _check_size(self, content: bytes, filename: str | None) -> None:
        if len(content) > self.config.max_file_size_bytes:
            raise FileTooLargeError(
                file_size=len(content),
                max_size=self.config.max_file_size_bytes,
                filename=filename,
            )
