"""Structured logging utilities for the sheetgrid import engine.

This module provides:
- Request and import ID tracking using contextvars for correlation
- Structured logging with consistent key=value formatting
- Timing helpers for import stages

Usage:
    from sheetgrid.utils.logging import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(import_id="imp-456", sheet="Sheet1"):
        logger.info("Decoding workbook", size_bytes=2048)
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
_import_id_var: ContextVar[str | None] = ContextVar("import_id", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_request_id() -> str | None:
    """Get the current request ID from context."""
    return _request_id_var.get()


def set_request_id(request_id: str | None) -> None:
    """Set the request ID in context."""
    _request_id_var.set(request_id)


def get_import_id() -> str | None:
    """Get the current import ID from context."""
    return _import_id_var.get()


def set_import_id(import_id: str | None) -> None:
    """Set the import ID in context."""
    _import_id_var.set(import_id)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars.

    Returns:
        Dictionary of extra context values.
    """
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars."""
    _extra_context_var.set(context)


def clear_context() -> None:
    """Clear all context variables."""
    _request_id_var.set(None)
    _import_id_var.set(None)
    _extra_context_var.set(None)


@dataclass
class PerformanceMetrics:
    """Container for metrics collected while an import stage runs.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        cells_processed: Number of decoded cells normalized and extracted.
        merges_processed: Number of merge regions folded.
        cells_degraded: Number of cells that fell back to safe defaults.
        custom_metrics: Additional custom metrics.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    cells_processed: int = 0
    merges_processed: int = 0
    cells_degraded: int = 0
    custom_metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging, omitting zero counters."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": self.duration_seconds,
        }
        if self.cells_processed > 0:
            result["cells_processed"] = self.cells_processed
        if self.merges_processed > 0:
            result["merges_processed"] = self.merges_processed
        if self.cells_degraded > 0:
            result["cells_degraded"] = self.cells_degraded
        if self.custom_metrics:
            result["custom_metrics"] = self.custom_metrics
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that prefixes messages with the active context.

    Adds request_id, import_id and any extra context values to every
    record when they are set.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information."""
        prefix_parts = []
        request_id = get_request_id()
        if request_id:
            prefix_parts.append(f"request_id={request_id}")
        import_id = get_import_id()
        if import_id:
            prefix_parts.append(f"import_id={import_id}")
        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        result = super().format(record)
        record.msg = original_msg

        return result


class StructuredLogger:
    """Logger wrapper that appends keyword arguments as key=value pairs.

    Example:
        logger.info("Grid assembled", rows=210, cols=60)
        # -> "Grid assembled | rows=210, cols=60"
    """

    def __init__(self, name: str) -> None:
        """Initialize the structured logger.

        Args:
            name: Logger name (typically __name__ of the module).
        """
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
        return self._logger

    def _build_message(self, message: str, **kwargs: Any) -> str:
        if not kwargs:
            return message

        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(self._build_message(message, **kwargs))

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        """Log performance metrics."""
        self.info(f"Performance: {metrics.operation}", **metrics.to_dict())

    def log_import_result(
        self,
        filename: str,
        success: bool,
        duration_seconds: float,
        rows: int = 0,
        cols: int = 0,
        merges: int = 0,
        colored_cells: int = 0,
        styled_cells: int = 0,
        degraded_cells: int = 0,
        error_message: str | None = None,
    ) -> None:
        """Log the single outcome of an import attempt.

        Args:
            filename: Name of the imported file.
            success: Whether the import produced a document.
            duration_seconds: Total processing time.
            rows: Grid row count.
            cols: Grid column count.
            merges: Number of merge spans kept.
            colored_cells: Cells with a background override.
            styled_cells: Cells with a style record.
            degraded_cells: Cells that fell back to defaults.
            error_message: Failure reason when ``success`` is False.
        """
        kwargs: dict[str, Any] = {
            "filename": filename,
            "success": success,
            "duration_seconds": f"{duration_seconds:.3f}",
        }
        if success:
            kwargs.update(
                rows=rows,
                cols=cols,
                merges=merges,
                colored_cells=colored_cells,
                styled_cells=styled_cells,
                degraded_cells=degraded_cells,
            )
        if error_message:
            kwargs["error"] = error_message

        level = logging.INFO if success else logging.ERROR
        self._logger.log(level, self._build_message("Import completed", **kwargs))


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(import_id="123", sheet="KPI"):
            logger.info("Decoding...")  # includes import_id and sheet
    """

    def __init__(self, **kwargs: Any) -> None:
        self._new_context = kwargs
        self._old_context: dict[str, Any] = {}
        self._old_import_id: str | None = None
        self._old_request_id: str | None = None

    def __enter__(self) -> "LogContext":
        """Enter the context, saving old values and setting new ones."""
        self._old_context = get_extra_context().copy()
        self._old_import_id = get_import_id()
        self._old_request_id = get_request_id()

        new_context = dict(self._new_context)
        import_id = new_context.pop("import_id", None)
        request_id = new_context.pop("request_id", None)

        if import_id is not None:
            set_import_id(import_id)
        if request_id is not None:
            set_request_id(request_id)

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring old values."""
        set_extra_context(self._old_context)
        set_import_id(self._old_import_id)
        set_request_id(self._old_request_id)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Context manager for timing an import stage.

    Usage:
        with timed_operation(logger, "assemble") as metrics:
            metrics.cells_processed = 1200

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        PerformanceMetrics instance for tracking.
    """
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Configure the root logger for the application.

    Args:
        level: Log level (int or string like "INFO").
        format_string: Custom format string (uses default if None).
        use_structured_formatter: Whether to use the structured formatter.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Workbook decoded", sheet="KPI", cells=1200)
    """
    return StructuredLogger(name)
