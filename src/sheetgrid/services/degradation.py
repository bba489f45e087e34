"""Per-cell degradation policy.

A malformed value or style must never invalidate an otherwise good import.
The normalizer and style extractor route every recoverable failure through
:func:`absorb`, which reports a :class:`CellDegradation` to a handler and
hands back the caller's fallback. The assembler supplies a
:class:`DegradationTracker` handler so degraded cells are counted once in
the import summary; everything else logs at debug level and moves on.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from typing import TypeVar

from sheetgrid.grid_document import Coordinate
from sheetgrid.utils.exceptions import CellDegradation
from sheetgrid.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DegradationHandler = Callable[[CellDegradation], None]

# Failures that stay local to one cell. Anything else is a bug and propagates.
RECOVERABLE_ERRORS: tuple[type[Exception], ...] = (
    CellDegradation,
    ArithmeticError,
    AttributeError,
    KeyError,
    TypeError,
    ValueError,
)


def log_degradation(degradation: CellDegradation) -> None:
    """Default handler: record the degradation at debug level only."""
    logger.debug("Cell degraded", **degradation.details, reason=degradation.message)


def absorb(
    aspect: str,
    func: Callable[[], T],
    fallback: T,
    handler: DegradationHandler | None = None,
) -> T:
    """Run ``func`` and return ``fallback`` if it fails recoverably.

    Args:
        aspect: Which part of the cell is being interpreted.
        func: Zero-argument callable doing the interpretation.
        fallback: Safe default returned on failure.
        handler: Receives the degradation; defaults to debug logging.
    """
    try:
        return func()
    except RECOVERABLE_ERRORS as exc:
        if isinstance(exc, CellDegradation):
            degradation = exc
        else:
            degradation = CellDegradation(
                f"{type(exc).__name__}: {exc}",
                aspect=aspect,
            )
        (handler or log_degradation)(degradation)
        return fallback


class DegradationTracker:
    """Counts degraded cells for one import.

    Call :meth:`for_cell` to get a handler bound to a coordinate; a cell
    degrading in several aspects is counted once.
    """

    def __init__(self) -> None:
        self._cells: set[Coordinate] = set()
        self.aspects: Counter[str] = Counter()

    @property
    def degraded_cells(self) -> int:
        return len(self._cells)

    def for_cell(self, row: int, col: int) -> DegradationHandler:
        def _record(degradation: CellDegradation) -> None:
            self._cells.add((row, col))
            self.aspects[degradation.aspect] += 1
            logger.debug(
                "Cell degraded",
                row=row,
                col=col,
                aspect=degradation.aspect,
                reason=degradation.message,
            )

        return _record
