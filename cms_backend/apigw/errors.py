"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module traduit les erreurs du domaine (`CMSError`) et les erreurs HTTP/FastAPI en réponses JSON
avec l'enveloppe standard `{code, message, trace_id, details}`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from cms_backend.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
)
from cms_backend.domain.errors import (
    BadRequestError,
    CMSError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    SchemaError,
    UnauthorizedError,
    ValidationError,
)

log = structlog.get_logger(__name__)

# Ordre significatif : la première classe correspondante l'emporte
STATUS_BY_ERROR: tuple[tuple[type[CMSError], int], ...] = (
    (ValidationError, HTTP_UNPROCESSABLE_ENTITY),
    (BadRequestError, HTTP_BAD_REQUEST),
    (UnauthorizedError, HTTP_UNAUTHORIZED),
    (ForbiddenError, HTTP_FORBIDDEN),
    (NotFoundError, HTTP_NOT_FOUND),
    (ConflictError, HTTP_CONFLICT),
    (SchemaError, HTTP_INTERNAL_SERVER_ERROR),
)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(code=code, message=message, trace_id=trace_id, details=details)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {
                "code": envelope.code,
                "message": envelope.message,
                "trace_id": envelope.trace_id,
                **({"details": envelope.details} if envelope.details else {}),
            }
        ),
    )


def extract_trace_id(request: Request) -> str | None:
    """Trace id depuis l'en-tête `X-Trace-ID`, sinon l'id posé par le middleware."""
    trace_id = request.headers.get("X-Trace-ID")
    if trace_id:
        return trace_id
    return getattr(request.state, "request_id", None)


def status_for(exc: CMSError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return HTTP_INTERNAL_SERVER_ERROR


def handle_domain_error(request: Request, exc: CMSError) -> JSONResponse:
    """Handle domain errors with standard envelope."""
    status = status_for(exc)
    trace_id = extract_trace_id(request)
    log_method = log.error if status >= HTTP_INTERNAL_SERVER_ERROR else log.info
    log_method(
        "domain_error",
        code=exc.code,
        status_code=status,
        error_message=exc.message,
        trace_id=trace_id,
    )
    return create_error_response(status, exc.code, exc.message, trace_id, exc.details)


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException with standard envelope."""
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return create_error_response(
        exc.status_code, code, str(exc.detail), extract_trace_id(request)
    )


def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Payload HTTP mal formé (avant même d'atteindre le domaine)."""
    violations = [
        {
            "path": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "code": "type",
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return create_error_response(
        HTTP_UNPROCESSABLE_ENTITY,
        ValidationError.code,
        "Request validation failed",
        extract_trace_id(request),
        {"violations": violations},
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with standard envelope."""
    trace_id = extract_trace_id(request)
    log.error(
        "unexpected_error",
        trace_id=trace_id,
        exception_type=type(exc).__name__,
        exc_info=exc,
    )
    return create_error_response(
        HTTP_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
        trace_id,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CMSError, handle_domain_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_generic_exception)
