"""Dataclasses representing an imported, styled grid document."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sheetgrid.services.style_pipeline import CellPresentation
    from sheetgrid.snapshot import GridSnapshot

Coordinate = tuple[int, int]


class CellKind(str, Enum):
    """How a cell's display string was derived."""

    LITERAL = "literal"
    FORMULA_RESULT = "formula_result"
    RICH_TEXT = "rich_text"
    DATE = "date"
    ERROR = "error"


class HorizontalAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class VerticalAlign(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class LineStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"
    DOUBLE = "double"


@dataclass(frozen=True)
class CellValue:
    """A ready-to-render cell value plus the kind it was derived from."""

    display: str
    kind: CellKind = CellKind.LITERAL

    @property
    def is_empty(self) -> bool:
        return self.display == ""


EMPTY_CELL = CellValue(display="", kind=CellKind.LITERAL)


@dataclass(frozen=True)
class BorderSpec:
    """One side of a cell border."""

    width_px: float
    style: LineStyle
    color: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "width_px", float(self.width_px))


@dataclass(frozen=True)
class StyleRecord:
    """Sparse visual attributes of one cell.

    ``None`` means "not set": the widget's own default applies. A field set
    to a value equal to the widget default still overrides it.
    """

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
    border_top: BorderSpec | None = None
    border_right: BorderSpec | None = None
    border_bottom: BorderSpec | None = None
    border_left: BorderSpec | None = None

    def set_fields(self) -> dict[str, Any]:
        """Return only the fields that carry a value."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.set_fields()


@dataclass(frozen=True)
class MergeSpan:
    """A rectangular group of cells presented as one, anchored top-left."""

    row: int
    col: int
    row_span: int
    col_span: int

    @property
    def end_row(self) -> int:
        return self.row + self.row_span - 1

    @property
    def end_col(self) -> int:
        return self.col + self.col_span - 1

    def overlaps(self, other: MergeSpan) -> bool:
        return not (
            other.row > self.end_row
            or other.end_row < self.row
            or other.col > self.end_col
            or other.end_col < self.col
        )

    def contains(self, row: int, col: int) -> bool:
        return self.row <= row <= self.end_row and self.col <= col <= self.end_col


@dataclass(frozen=True)
class GridDocument:
    """The imported grid handed to the grid widget.

    Produced once per successful import and never mutated by the engine.
    ``cells`` is dense and row-major; ``background_colors`` and
    ``cell_styles`` are sparse and keyed by ``(row, col)``.
    """

    row_count: int
    col_count: int
    cells: tuple[tuple[CellValue, ...], ...]
    merges: tuple[MergeSpan, ...] = ()
    background_colors: Mapping[Coordinate, str] = field(default_factory=dict)
    cell_styles: Mapping[Coordinate, StyleRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.cells) != self.row_count or any(
            len(row) != self.col_count for row in self.cells
        ):
            raise ValueError(
                f"cells matrix does not match {self.row_count}x{self.col_count}"
            )
        object.__setattr__(
            self, "background_colors", MappingProxyType(dict(self.background_colors))
        )
        object.__setattr__(
            self, "cell_styles", MappingProxyType(dict(self.cell_styles))
        )

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.row_count and 0 <= col < self.col_count

    def get_cell(self, row: int, col: int) -> CellValue:
        """Return the cell value at ``(row, col)``.

        Raises:
            IndexError: If the coordinate lies outside the grid.
        """
        if not self.in_bounds(row, col):
            raise IndexError(
                f"({row}, {col}) outside grid {self.row_count}x{self.col_count}"
            )
        return self.cells[row][col]

    def get_merge_list(self) -> list[MergeSpan]:
        return list(self.merges)

    def get_style_for(
        self, row: int, col: int, defaults: CellPresentation | None = None
    ) -> CellPresentation:
        """Return the effective presentation of ``(row, col)``.

        Layers the cell's background and style record over ``defaults``
        (the widget's current defaults; a plain ``CellPresentation()`` when
        omitted).
        """
        from sheetgrid.services.style_pipeline import CellPresentation, apply_cell_style

        return apply_cell_style(self, row, col, defaults or CellPresentation())

    def to_snapshot(self) -> GridSnapshot:
        """Return the persistable snapshot of this document."""
        from sheetgrid.snapshot import to_snapshot

        return to_snapshot(self)

    @classmethod
    def from_snapshot(cls, snapshot: GridSnapshot) -> GridDocument:
        """Rebuild a document from a persisted snapshot."""
        from sheetgrid.snapshot import from_snapshot

        return from_snapshot(snapshot)

    def display_matrix(self) -> list[list[str]]:
        """Return the display strings as a list of rows."""
        return [[cell.display for cell in row] for row in self.cells]

    def iter_populated(self) -> Iterator[tuple[int, int, CellValue]]:
        """Yield ``(row, col, value)`` for every non-empty cell."""
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                if not cell.is_empty:
                    yield r, c, cell
