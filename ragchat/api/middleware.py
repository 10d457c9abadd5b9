"""API middleware: CORS, request logging, and error handling.

Middleware runs as a stack (last added, first executed).  ``main.py`` adds
ErrorHandlingMiddleware before RequestLoggingMiddleware, so the request
log sees the final status code after errors have been translated.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ragchat.api.schemas import ErrorResponse
from ragchat.utils.errors import (
    ConfigurationError,
    EmbeddingError,
    ExtractionError,
    GenerationError,
    LLMError,
    NotFoundError,
    RagChatError,
    UnavailableError,
    ValidationError,
)
from ragchat.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Checked in order; the first matching class wins.
_STATUS_CODES: tuple[tuple[type[RagChatError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ExtractionError, 422),
    (UnavailableError, 503),
    (GenerationError, 502),
    (LLMError, 502),
    (EmbeddingError, 502),
    (ConfigurationError, 500),
)


def status_code_for(exc: RagChatError) -> int:
    for error_type, status in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; defaults to allowing every origin."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Translate ``RagChatError`` subclasses into JSON error responses.

    The client receives the error class name and message with the status
    code from :func:`status_code_for`; provider details stay in the log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except RagChatError as exc:
            status = status_code_for(exc)
            log = _logger.warning if status < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status,
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=status, content=body.model_dump())
