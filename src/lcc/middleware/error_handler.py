"""Global error handler: consistent JSON error responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lcc.errors import ExternalServiceError, LCCError, StateConflict

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(LCCError)
    async def domain_exception_handler(request: Request, exc: LCCError) -> JSONResponse:
        """Turn domain errors into a structured failure result."""
        if isinstance(exc, ExternalServiceError):
            logger.error(
                "external_service_error",
                path=request.url.path,
                code=exc.code,
                error=exc.message,
                cause=repr(exc.__cause__) if exc.__cause__ else None,
            )
        elif isinstance(exc, StateConflict):
            logger.warning("state_conflict", path=request.url.path, code=exc.code, error=exc.message)
        else:
            logger.info("domain_error", path=request.url.path, code=exc.code, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.code, "detail": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": "http_error", "detail": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle request validation errors with consistent JSON format."""
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "validation_error",
                "detail": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions, always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "internal_error", "detail": "Internal server error"},
        )
