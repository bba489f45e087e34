"""Export grid display values as pandas DataFrames and CSV."""

from __future__ import annotations

import pandas as pd

from sheetgrid.grid_document import GridDocument


def populated_extent(document: GridDocument) -> tuple[int, int]:
    """Return ``(rows, cols)`` spanned by non-empty cells."""
    rows = cols = 0
    for row, col, _ in document.iter_populated():
        rows = max(rows, row + 1)
        cols = max(cols, col + 1)
    return rows, cols


def to_dataframe(document: GridDocument, trim: bool = True) -> pd.DataFrame:
    """Return the display strings as a DataFrame.

    Args:
        document: Grid to export.
        trim: Drop the empty margin past the last populated row and column.
    """
    matrix = document.display_matrix()
    if trim:
        rows, cols = populated_extent(document)
        matrix = [row[:cols] for row in matrix[:rows]]
    if not matrix or not matrix[0]:
        return pd.DataFrame()
    return pd.DataFrame(matrix, dtype="string")


def to_csv(document: GridDocument) -> str:
    """Render the trimmed grid as CSV text without index or header."""
    frame = to_dataframe(document, trim=True)
    if frame.empty:
        return ""
    return frame.to_csv(index=False, header=False, lineterminator="\n")
