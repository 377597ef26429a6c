"""Structured error responses for rule model errors and unexpected failures."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from .correlation import get_correlation_id
from ..rules.errors import (
    ParseError,
    PolicyNotFound,
    PreconditionViolation,
    RuleModelError,
    SaveFailure,
)

log = structlog.get_logger()

# Status codes for rule model errors; more specific classes first
ERROR_STATUS: list[tuple[type[RuleModelError], int]] = [
    (ParseError, 422),
    (PolicyNotFound, 404),
    (PreconditionViolation, 409),
    (SaveFailure, 502),
]


def error_body(error: str, message: str, request: Request, **extra) -> dict:
    return {
        "error": error,
        "message": message,
        "correlation_id": get_correlation_id(),
        "path": str(request.url.path),
        **extra,
    }


async def rule_model_error_handler(request: Request, exc: RuleModelError) -> JSONResponse:
    status_code = next(
        (status for cls, status in ERROR_STATUS if isinstance(exc, cls)),
        400,
    )
    log.warning(
        "rule_model.error",
        error_type=exc.__class__.__name__,
        message=str(exc),
        status_code=status_code,
    )
    extra = {"retryable": True} if isinstance(exc, SaveFailure) else {}
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.__class__.__name__, str(exc), request, **extra),
    )


def register_exception_handlers(app: FastAPI):
    """Map rule model errors to JSON error responses."""
    app.add_exception_handler(RuleModelError, rule_model_error_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns unhandled exceptions into a structured 500 response."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            log.error(
                "unhandled.exception",
                error=str(exc),
                error_type=exc.__class__.__name__,
                path=request.url.path,
                exc_info=True
            )
            return JSONResponse(
                status_code=500,
                content=error_body("InternalServerError", "An unexpected error occurred", request),
            )
