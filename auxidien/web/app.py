"""
FastAPI application factory for the record service.
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from auxidien import __version__
from auxidien.core.config import RecordServiceSettings
from auxidien.core.exceptions import (
    AdmissionError,
    AuthorizationError,
    AuxidienError,
    ErrorCode,
    MagnitudeError,
    RateLimitError,
    ValidationError,
    error_handler,
    format_error_response,
)
from auxidien.core.logging import log_context
from auxidien.core.record import DuckDBEventJournal, PriceRecord
from auxidien.web.routes import health_router, metrics_router, record_router
from auxidien.web.utils import get_request_id

_ADMISSION_STATUS: dict[type[AdmissionError], int] = {
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RateLimitError: status.HTTP_429_TOO_MANY_REQUESTS,
    MagnitudeError: status.HTTP_409_CONFLICT,
}


def build_record(settings: RecordServiceSettings) -> PriceRecord:
    return PriceRecord(
        settings.admin_account,
        min_update_interval=settings.min_update_interval,
        max_change_rate_bps=settings.max_change_rate_bps,
        updaters=settings.updaters,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log start and close the event journal on shutdown."""
    record: PriceRecord = app.state.record
    logger.info(
        "Record service started: state {}, interval {}s, max change {} bps",
        record.state.value,
        record.min_update_interval,
        record.max_change_rate_bps,
    )
    yield
    journal = app.state.journal
    if journal is not None:
        journal.close()
    logger.info("Record service stopped")


def create_app(
    settings: RecordServiceSettings | None = None,
    *,
    record: PriceRecord | None = None,
    journal: DuckDBEventJournal | None = None,
) -> FastAPI:
    """Create the record service.

    ``record`` and ``journal`` default to instances built from
    ``settings``; pass them explicitly to share a record with in-process
    callers or tests.
    """
    settings = settings or RecordServiceSettings()
    if record is None:
        record = build_record(settings)
    if journal is None and settings.journal_path:
        journal = DuckDBEventJournal(settings.journal_path)
    if journal is not None:
        record.subscribe(journal)

    app = FastAPI(
        title="auxidien record",
        description="Authoritative precious-metal index price record with admission control",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.record = record
    app.state.journal = journal
    app.state.api_tokens = dict(settings.api_tokens)
    app.state.start_time = time.time()

    _setup_middleware(app)
    _setup_routes(app)
    _setup_exception_handlers(app)
    return app


def _setup_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def trace_requests(request: Request, call_next):
        started = time.perf_counter()
        with log_context(trace_id=get_request_id(request), path=request.url.path) as trace_id:
            response = await call_next(request)
            response.headers["X-Request-ID"] = trace_id
            logger.debug(
                "{} {} -> {} in {:.1f}ms",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
        return response


def _setup_routes(app: FastAPI) -> None:
    app.include_router(record_router, prefix="/api/v1/record", tags=["record"])
    app.include_router(health_router, prefix="/api/v1", tags=["health"])
    app.include_router(metrics_router)


def _error_response(status_code: int, payload: dict, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, **payload}, headers=headers)


def _setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AdmissionError)
    async def admission_exception_handler(request: Request, exc: AdmissionError) -> JSONResponse:
        status_code = _ADMISSION_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
        headers = None
        if isinstance(exc, RateLimitError) and exc.retry_after is not None:
            headers = {"Retry-After": str(exc.retry_after)}
        return _error_response(status_code, format_error_response(exc.error_code, exc.message, exc.details), headers)

    @app.exception_handler(AuxidienError)
    async def auxidien_exception_handler(request: Request, exc: AuxidienError) -> JSONResponse:
        error_handler.log_error(exc, {"path": request.url.path})
        return _error_response(
            status.HTTP_400_BAD_REQUEST, format_error_response(exc.error_code, exc.message, exc.details)
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            format_error_response(ErrorCode.VALIDATION_ERROR.value, "invalid request", {"errors": exc.errors()}),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        code = ErrorCode.AUTHORIZATION_ERROR if exc.status_code == 401 else ErrorCode.GENERAL_ERROR
        return _error_response(
            exc.status_code, format_error_response(code.value, str(exc.detail)), getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        error_handler.log_error(exc, {"path": request.url.path})
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            format_error_response(ErrorCode.INTERNAL_ERROR.value, "internal server error", {"type": type(exc).__name__}),
        )
