"""Sheetgrid - spreadsheet import and style-extraction engine."""

__version__ = "0.1.0"

from sheetgrid.api import app, create_app  # noqa: E402

__all__ = ["app", "create_app"]


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from sheetgrid.config import settings

    uvicorn.run(
        "sheetgrid.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
