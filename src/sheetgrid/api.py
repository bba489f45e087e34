"""FastAPI application exposing the workbook import engine."""

import uuid
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import (
    FastAPI,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from sheetgrid import __version__
from sheetgrid.config import settings, validate_settings_on_startup
from sheetgrid.models import ErrorDetail, HealthResponse, ImportResponse
from sheetgrid.services.grid_export import to_csv
from sheetgrid.services.import_service import GridImportService
from sheetgrid.snapshot import GridSnapshot, from_snapshot
from sheetgrid.utils.exceptions import ErrorCode, SheetGridError, ValidationError
from sheetgrid.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Sheetgrid Import API",
        description=(
            "Decode uploaded spreadsheets into styled grid documents ready for "
            "a grid-editing widget."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS using settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Validate settings on startup
    validate_settings_on_startup(settings)

    import_service = GridImportService(settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID, expose it in logs and echo it in the response."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(SheetGridError)
    async def sheetgrid_exception_handler(
        request: Request, exc: SheetGridError
    ) -> JSONResponse:
        """Return structured error responses for engine exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.error(
            f"Import error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail.from_error_code(
                exc.error_code,
                exc.message,
                details=exc.details or None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all handler that hides internals unless debugging."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if settings.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail.from_error_code(
                ErrorCode.INTERNAL_ERROR, detail, request_id=request_id
            ).model_dump(exclude_none=True),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> dict[str, Any]:
        """Check the health status of the service."""
        request_id = getattr(request.state, "request_id", None)
        logger.debug("Health check requested", request_id=request_id)
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": __version__,
        }

    @app.post(
        "/import",
        response_model=ImportResponse,
        tags=["Import"],
        responses={
            400: {"model": ErrorDetail, "description": "Missing file"},
            413: {"model": ErrorDetail, "description": "File or grid too large"},
            415: {"model": ErrorDetail, "description": "Not a workbook"},
            422: {"model": ErrorDetail, "description": "Workbook cannot be decoded"},
        },
    )
    async def import_workbook(
        request: Request,
        file: Annotated[UploadFile, File(description="Workbook to import")],
        sheet_name: Annotated[
            str | None, Form(description="Worksheet to import (default: first)")
        ] = None,
    ) -> ImportResponse:
        """Import one worksheet of an uploaded workbook as a grid document.

        Returns the import summary together with the document snapshot the
        grid widget loads and later persists.
        """
        request_id = getattr(request.state, "request_id", None)

        if file.filename is None or file.filename == "":
            logger.warning("Import request missing file", request_id=request_id)
            raise ValidationError(
                message="A workbook file must be provided",
                field="file",
            )

        content = await file.read()
        result = await run_in_threadpool(
            import_service.import_bytes,
            content,
            filename=file.filename,
            mime_type=file.content_type,
            sheet_name=sheet_name or None,
        )

        return ImportResponse(
            filename=file.filename,
            sheet_name=result.sheet_name,
            sheet_names=result.sheet_names,
            message=result.message,
            summary=result.summary,
            snapshot=result.document.to_snapshot(),
        )

    @app.post(
        "/export/csv",
        response_class=PlainTextResponse,
        tags=["Export"],
        responses={400: {"model": ErrorDetail, "description": "Invalid snapshot"}},
    )
    async def export_csv(snapshot: GridSnapshot) -> PlainTextResponse:
        """Render a grid snapshot's display values as CSV."""
        document = from_snapshot(snapshot)
        return PlainTextResponse(to_csv(document), media_type="text/csv")

    return app


# Create the default app instance
app = create_app()
