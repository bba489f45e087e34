"""Services for the sheetgrid import engine."""

from sheetgrid.services.grid_assembler import AssembledGrid, GridAssembler
from sheetgrid.services.import_service import GridImportService, ImportResult
from sheetgrid.services.workbook_decoder import DecodedSheet, WorkbookDecoder

__all__ = [
    "AssembledGrid",
    "DecodedSheet",
    "GridAssembler",
    "GridImportService",
    "ImportResult",
    "WorkbookDecoder",
]
