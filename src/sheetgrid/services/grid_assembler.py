"""Assemble decoded worksheets into grid documents.

The assembler owns the sizing policy: the grid covers the true used range
(decoded cells and merge regions are scanned rather than trusting declared
extents) plus a margin of empty rows and columns, and never shrinks below
the configured floor. The whole matrix is refused before allocation when it
would exceed the configured maximum cell count.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import chain

from sheetgrid.config import Settings, settings
from sheetgrid.grid_document import (
    EMPTY_CELL,
    CellValue,
    Coordinate,
    GridDocument,
    MergeSpan,
    StyleRecord,
)
from sheetgrid.models import ImportSummary
from sheetgrid.services.color_resolver import WHITE
from sheetgrid.services.degradation import DegradationTracker
from sheetgrid.services.style_extractor import extract
from sheetgrid.services.value_normalizer import normalize
from sheetgrid.services.workbook_decoder import DecodedSheet
from sheetgrid.utils.exceptions import SizingOverflowError
from sheetgrid.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssembledGrid:
    """A finished document and the counts reported for it."""

    document: GridDocument
    summary: ImportSummary


class GridAssembler:
    """Build a :class:`GridDocument` from a :class:`DecodedSheet`."""

    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings

    def grid_size(self, used_rows: int, used_cols: int) -> tuple[int, int]:
        """Return ``(row_count, col_count)`` for a used range."""
        margin = self.config.grid_margin
        return (
            max(used_rows + margin, self.config.floor_rows),
            max(used_cols + margin, self.config.floor_cols),
        )

    def assemble(self, decoded: DecodedSheet) -> AssembledGrid:
        """Assemble the document for one decoded worksheet.

        Raises:
            SizingOverflowError: If the grid would exceed the maximum cell
                count. Nothing is allocated in that case.
        """
        raw_cells = list(decoded.iter_cells())
        # Declared merges count toward the used range so they are never clipped
        used_rows = max(
            chain(
                (cell.row + 1 for cell in raw_cells),
                (end_row + 1 for _, _, end_row, _ in decoded.merges),
            ),
            default=0,
        )
        used_cols = max(
            chain(
                (cell.col + 1 for cell in raw_cells),
                (end_col + 1 for _, _, _, end_col in decoded.merges),
            ),
            default=0,
        )
        row_count, col_count = self.grid_size(used_rows, used_cols)

        if row_count * col_count > self.config.max_cell_count:
            raise SizingOverflowError(
                row_count * col_count,
                self.config.max_cell_count,
                sheet_name=decoded.sheet_name,
            )

        matrix: list[list[CellValue]] = [
            [EMPTY_CELL] * col_count for _ in range(row_count)
        ]
        background_colors: dict[Coordinate, str] = {}
        cell_styles: dict[Coordinate, StyleRecord] = {}
        tracker = DegradationTracker()

        for raw in raw_cells:
            on_degraded = tracker.for_cell(raw.row, raw.col)
            matrix[raw.row][raw.col] = normalize(
                raw.value, raw.number_format, on_degraded
            )
            extraction = extract(raw.style, on_degraded)
            if extraction.background is not None and not (
                self.config.filter_white_background and extraction.background == WHITE
            ):
                background_colors[(raw.row, raw.col)] = extraction.background
            if not extraction.style.is_empty():
                cell_styles[(raw.row, raw.col)] = extraction.style

        merges, skipped = self.fold_merges(decoded.merges, row_count, col_count)

        document = GridDocument(
            row_count=row_count,
            col_count=col_count,
            cells=tuple(tuple(row) for row in matrix),
            merges=tuple(merges),
            background_colors=background_colors,
            cell_styles=cell_styles,
        )
        summary = ImportSummary(
            rows=row_count,
            cols=col_count,
            used_rows=used_rows,
            used_cols=used_cols,
            merges=len(merges),
            colored_cells=len(background_colors),
            styled_cells=len(cell_styles),
            degraded_cells=tracker.degraded_cells,
            skipped_merges=skipped,
        )
        logger.debug("Grid assembled", sheet=decoded.sheet_name, **summary.model_dump())
        return AssembledGrid(document=document, summary=summary)

    @staticmethod
    def fold_merges(
        regions: list[tuple[int, int, int, int]], row_count: int, col_count: int
    ) -> tuple[list[MergeSpan], int]:
        """Translate merge regions into non-overlapping spans.

        Regions anchored outside the grid are skipped, the rest are clipped
        to the grid bounds. A region overlapping an earlier kept span is
        dropped, as is any region that collapses to a single cell.

        Returns:
            The kept spans and the number of regions dropped.
        """
        kept: list[MergeSpan] = []
        skipped = 0
        for start_row, start_col, end_row, end_col in regions:
            if not (0 <= start_row < row_count and 0 <= start_col < col_count):
                logger.warning(
                    "Skipping merge anchored outside grid",
                    row=start_row,
                    col=start_col,
                    rows=row_count,
                    cols=col_count,
                )
                skipped += 1
                continue

            span = MergeSpan(
                row=start_row,
                col=start_col,
                row_span=min(end_row, row_count - 1) - start_row + 1,
                col_span=min(end_col, col_count - 1) - start_col + 1,
            )
            if span.row_span < 1 or span.col_span < 1:
                skipped += 1
                continue
            if span.row_span == 1 and span.col_span == 1:
                skipped += 1
                continue
            if any(span.overlaps(existing) for existing in kept):
                logger.warning(
                    "Skipping merge overlapping an earlier merge",
                    row=span.row,
                    col=span.col,
                    row_span=span.row_span,
                    col_span=span.col_span,
                )
                skipped += 1
                continue
            kept.append(span)
        return kept, skipped
