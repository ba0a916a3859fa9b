"""
Authenticity Engine Errors
==========================

Only input validation errors and OCR failures on image inputs ever reach the
caller. Generative failures are absorbed inside the generative adapter.
"""

from enum import Enum
from typing import Optional


class ServiceErrorCause(str, Enum):
    """Why an external service call failed."""
    QUOTA = "quota"                      # Quota exhausted, rate limited, timed out or unavailable
    PERMISSION = "permission"            # Bad key, API disabled, IAM denied
    MALFORMED_INPUT = "malformed-input"  # The service could not decode the document
    UNKNOWN = "unknown"


class AuthenticityError(Exception):
    """Base class for all authenticity engine errors."""


class UnsupportedMediaType(AuthenticityError):
    """Raised when the document mime type is not one the engine can analyze."""

    def __init__(self, mime_type: str, supported: tuple[str, ...] = ()):
        self.mime_type = mime_type
        self.supported = supported
        message = f"Unsupported file type: {mime_type or '<none>'}"
        if supported:
            message += f". Supported types: {', '.join(supported)}"
        super().__init__(message)


class EmptyInput(AuthenticityError):
    """Raised for zero-length documents."""

    def __init__(self, message: str = "The file is empty or contains no data"):
        super().__init__(message)


class ExternalServiceError(AuthenticityError):
    """An OCR/vision call failed. Propagated to the caller for image inputs."""

    def __init__(
        self,
        cause: ServiceErrorCause,
        message: str,
        status_code: Optional[int] = None,
    ):
        self.cause = cause
        self.status_code = status_code
        super().__init__(message)


class GenerativeAnalysisError(AuthenticityError):
    """Transport or API failure of the generative analyzer. Never propagated."""


class ResponseParseError(AuthenticityError):
    """The generative response held no usable JSON object. Never propagated."""


def classify_service_error(message: str, status_code: Optional[int] = None) -> ServiceErrorCause:
    """Map an HTTP status and/or error message to a ServiceErrorCause."""
    text = (message or "").lower()

    if status_code in (429, 503, 504) or "quota" in text or "rate limit" in text or "resource_exhausted" in text:
        return ServiceErrorCause.QUOTA
    if status_code in (401, 403) or "permission" in text or "api key" in text or "unauthenticated" in text:
        return ServiceErrorCause.PERMISSION
    if "bad image data" in text or "invalid image" in text or "unsupported image" in text or "corrupt" in text:
        return ServiceErrorCause.MALFORMED_INPUT
    if status_code == 400 and "image" in text:
        return ServiceErrorCause.MALFORMED_INPUT
    return ServiceErrorCause.UNKNOWN
