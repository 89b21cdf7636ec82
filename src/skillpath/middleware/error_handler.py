"""Global error handlers: every error renders as ``{"detail": ...}`` JSON."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from skillpath.roadmap.errors import (
    AssignmentNotFoundError,
    PathNotFoundError,
    RoadmapError,
    RoadmapModificationError,
)

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": exc.errors()},
        )

    @app.exception_handler(RoadmapError)
    async def roadmap_exception_handler(request: Request, exc: RoadmapError) -> JSONResponse:
        """Map engine failures onto HTTP statuses."""
        if isinstance(exc, (PathNotFoundError, AssignmentNotFoundError)):
            return JSONResponse(status_code=404, content={"detail": str(exc)})
        if isinstance(exc, RoadmapModificationError):
            restore = exc.restore.to_dict() if exc.restore else None
            return JSONResponse(
                status_code=500,
                content={"detail": str(exc), "restored": exc.restored, "restore": restore},
            )
        logger.warning("roadmap_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
