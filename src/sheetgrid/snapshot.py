"""Serializable snapshot of a grid document.

The snapshot carries the four fields the persistence layer stores (cells,
merges, cell styles, background colors) plus the grid geometry. Sparse maps
are written as lists of ``{row, col, ...}`` entries so coordinates stay
typed on the wire. JSON keys are camelCase.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from sheetgrid.grid_document import (
    BorderSpec,
    CellKind,
    CellValue,
    GridDocument,
    HorizontalAlign,
    LineStyle,
    MergeSpan,
    StyleRecord,
    VerticalAlign,
)
from sheetgrid.utils.exceptions import ValidationError

BORDER_FIELDS = ("border_top", "border_right", "border_bottom", "border_left")


class SnapshotModel(BaseModel):
    """Base model using camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BorderModel(SnapshotModel):
    width_px: float = Field(..., ge=0, description="Line width in pixels")
    style: LineStyle = Field(..., description="Line style")
    color: str = Field(..., description="Line color as #RRGGBB")


class CellEntry(SnapshotModel):
    """Base for sparse entries keyed by a cell coordinate."""

    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


class CellKindEntry(CellEntry):
    """Kind of a non-literal cell."""

    kind: CellKind


class MergeModel(SnapshotModel):
    row: int = Field(..., ge=0, description="Anchor row (0-based)")
    col: int = Field(..., ge=0, description="Anchor column (0-based)")
    row_span: int = Field(..., ge=1, description="Rows covered")
    col_span: int = Field(..., ge=1, description="Columns covered")


class BackgroundEntry(CellEntry):
    color: str = Field(..., description="Background color as #RRGGBB")


class StyleEntry(CellEntry):
    """Style record of one cell; omitted fields are not set."""

    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    strikethrough: bool | None = None
    text_color: str | None = None
    font_size_px: float | None = None
    font_family: str | None = None
    horizontal_align: HorizontalAlign | None = None
    vertical_align: VerticalAlign | None = None
    wrap_text: bool | None = None
    rotation_deg: int | None = None
    indent_px: int | None = None
    border_top: BorderModel | None = None
    border_right: BorderModel | None = None
    border_bottom: BorderModel | None = None
    border_left: BorderModel | None = None


class GridSnapshot(SnapshotModel):
    """Wire form of a :class:`GridDocument`."""

    row_count: int = Field(..., ge=0, description="Number of grid rows")
    col_count: int = Field(..., ge=0, description="Number of grid columns")
    cells: list[list[str]] = Field(
        default_factory=list, description="Display strings, row-major"
    )
    cell_kinds: list[CellKindEntry] = Field(
        default_factory=list, description="Kinds of non-literal cells"
    )
    merges: list[MergeModel] = Field(default_factory=list)
    cell_styles: list[StyleEntry] = Field(default_factory=list)
    background_colors: list[BackgroundEntry] = Field(default_factory=list)


def to_snapshot(document: GridDocument) -> GridSnapshot:
    """Convert a document to its snapshot model."""
    cell_kinds = [
        CellKindEntry(row=r, col=c, kind=cell.kind)
        for r, row in enumerate(document.cells)
        for c, cell in enumerate(row)
        if cell.kind is not CellKind.LITERAL
    ]
    styles = []
    for (row, col), record in sorted(document.cell_styles.items()):
        values = record.set_fields()
        for name in BORDER_FIELDS:
            if name in values:
                border: BorderSpec = values[name]
                values[name] = BorderModel(
                    width_px=border.width_px, style=border.style, color=border.color
                )
        styles.append(StyleEntry(row=row, col=col, **values))

    return GridSnapshot(
        row_count=document.row_count,
        col_count=document.col_count,
        cells=document.display_matrix(),
        cell_kinds=cell_kinds,
        merges=[
            MergeModel(
                row=m.row, col=m.col, row_span=m.row_span, col_span=m.col_span
            )
            for m in document.merges
        ],
        cell_styles=styles,
        background_colors=[
            BackgroundEntry(row=row, col=col, color=color)
            for (row, col), color in sorted(document.background_colors.items())
        ],
    )


def from_snapshot(snapshot: GridSnapshot) -> GridDocument:
    """Rebuild a document from a snapshot.

    Raises:
        ValidationError: If the cells do not match the geometry, a sparse
            entry lies outside the grid, or merges leave the grid or overlap.
    """
    _check_consistency(snapshot)

    kinds = {(entry.row, entry.col): entry.kind for entry in snapshot.cell_kinds}
    cells = tuple(
        tuple(
            CellValue(display=display, kind=kinds.get((r, c), CellKind.LITERAL))
            for c, display in enumerate(row)
        )
        for r, row in enumerate(snapshot.cells)
    )

    cell_styles: dict[tuple[int, int], StyleRecord] = {}
    for entry in snapshot.cell_styles:
        values = entry.model_dump(exclude={"row", "col"}, exclude_none=True)
        for name in BORDER_FIELDS:
            border = getattr(entry, name)
            if border is not None:
                values[name] = BorderSpec(
                    width_px=border.width_px, style=border.style, color=border.color
                )
        cell_styles[(entry.row, entry.col)] = StyleRecord(**values)

    try:
        return GridDocument(
            row_count=snapshot.row_count,
            col_count=snapshot.col_count,
            cells=cells,
            merges=tuple(
                MergeSpan(
                    row=m.row, col=m.col, row_span=m.row_span, col_span=m.col_span
                )
                for m in snapshot.merges
            ),
            background_colors={
                (entry.row, entry.col): entry.color
                for entry in snapshot.background_colors
            },
            cell_styles=cell_styles,
        )
    except ValueError as exc:
        raise ValidationError(str(exc), field="cells") from exc


def _check_consistency(snapshot: GridSnapshot) -> None:
    rows, cols = snapshot.row_count, snapshot.col_count

    sparse: dict[str, Sequence[CellEntry]] = {
        "cellKinds": snapshot.cell_kinds,
        "cellStyles": snapshot.cell_styles,
        "backgroundColors": snapshot.background_colors,
    }
    for field, entries in sparse.items():
        stray = [(e.row, e.col) for e in entries if e.row >= rows or e.col >= cols]
        if stray:
            raise ValidationError(
                f"{field} has entries outside the {rows}x{cols} grid",
                field=field,
                details={"coordinates": stray},
            )

    kept: list[MergeSpan] = []
    for m in snapshot.merges:
        span = MergeSpan(
            row=m.row, col=m.col, row_span=m.row_span, col_span=m.col_span
        )
        if span.end_row >= rows or span.end_col >= cols:
            raise ValidationError(
                f"Merge at ({span.row}, {span.col}) leaves the {rows}x{cols} grid",
                field="merges",
                details={"merge": m.model_dump(by_alias=True)},
            )
        if any(span.overlaps(existing) for existing in kept):
            raise ValidationError(
                f"Merge at ({span.row}, {span.col}) overlaps an earlier merge",
                field="merges",
                details={"merge": m.model_dump(by_alias=True)},
            )
        kept.append(span)


def dumps(document: GridDocument) -> str:
    """Serialize a document to snapshot JSON."""
    return to_snapshot(document).model_dump_json(by_alias=True, exclude_none=True)


def loads(data: str | bytes) -> GridDocument:
    """Load a document from snapshot JSON.

    Raises:
        ValidationError: If the JSON is malformed or inconsistent.
    """
    try:
        snapshot = GridSnapshot.model_validate_json(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid grid snapshot",
            field="snapshot",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
    return from_snapshot(snapshot)
