"""
DocuValle - Exception Handlers
Maps authenticity engine errors to JSON error responses.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.services.authenticity.errors import (
    AuthenticityError,
    EmptyInput,
    ExternalServiceError,
    ServiceErrorCause,
    UnsupportedMediaType,
)

logger = logging.getLogger(__name__)

SERVICE_ERROR_STATUS = {
    ServiceErrorCause.QUOTA: 503,
    ServiceErrorCause.PERMISSION: 502,
    ServiceErrorCause.MALFORMED_INPUT: 422,
    ServiceErrorCause.UNKNOWN: 502,
}

SERVICE_ERROR_CODES = {
    ServiceErrorCause.QUOTA: "QUOTA_EXCEEDED",
    ServiceErrorCause.PERMISSION: "VISION_PERMISSION_ERROR",
    ServiceErrorCause.MALFORMED_INPUT: "INVALID_IMAGE_DATA",
    ServiceErrorCause.UNKNOWN: "VISION_API_ERROR",
}


def _error_response(status_code: int, code: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "detail": detail})


async def unsupported_media_type_handler(request: Request, exc: UnsupportedMediaType) -> JSONResponse:
    return _error_response(415, "UNSUPPORTED_MEDIA_TYPE", str(exc))


async def empty_input_handler(request: Request, exc: EmptyInput) -> JSONResponse:
    return _error_response(400, "EMPTY_FILE", str(exc))


async def external_service_error_handler(request: Request, exc: ExternalServiceError) -> JSONResponse:
    logger.error("Vision service error (%s) on %s: %s", exc.cause.value, request.url.path, exc)
    return _error_response(
        SERVICE_ERROR_STATUS[exc.cause],
        SERVICE_ERROR_CODES[exc.cause],
        str(exc),
    )


async def authenticity_error_handler(request: Request, exc: AuthenticityError) -> JSONResponse:
    logger.error("Authenticity analysis error on %s: %s", request.url.path, exc)
    return _error_response(500, "ANALYSIS_ERROR", str(exc))


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers, most specific first."""
    app.add_exception_handler(UnsupportedMediaType, unsupported_media_type_handler)
    app.add_exception_handler(EmptyInput, empty_input_handler)
    app.add_exception_handler(ExternalServiceError, external_service_error_handler)
    app.add_exception_handler(AuthenticityError, authenticity_error_handler)
