"""
DocuValle - Google Cloud Vision Client
OCR + logo / object / label / image-property annotation over the REST API.

Images go to `images:annotate`; PDFs go to `files:annotate`, whose per-page
responses are folded into a single annotation bundle.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from .errors import ExternalServiceError, ServiceErrorCause, classify_service_error
from .models import PDF_MIME_TYPE

logger = logging.getLogger(__name__)

# 1x1 transparent PNG used by the connectivity check
_CHECK_IMAGE = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChAI9jU77ygAAAABJRU5ErkJggg=="
)

# Synchronous files:annotate accepts at most 5 pages
PDF_PAGES = [1, 2, 3, 4, 5]


class VisionClient(Protocol):
    """What the extractor needs from an OCR/vision backend."""

    async def annotate(
        self,
        content: bytes,
        mime_type: str,
        features: List[Dict[str, Any]],
        language_hints: List[str],
    ) -> Dict[str, Any]:
        """Return one AnnotateImageResponse-shaped dict or raise ExternalServiceError."""
        ...


class GoogleVisionClient:
    """
    Google Cloud Vision REST client authenticated with an API key.
    Owns one httpx.AsyncClient unless one is injected.
    """

    DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1"

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_available(self) -> bool:
        """Check if Vision is configured."""
        return bool(self.api_key)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def annotate(
        self,
        content: bytes,
        mime_type: str,
        features: List[Dict[str, Any]],
        language_hints: List[str],
    ) -> Dict[str, Any]:
        if not self.is_available:
            raise ExternalServiceError(
                ServiceErrorCause.PERMISSION,
                "Vision API key is not configured",
            )

        encoded = base64.b64encode(content).decode("ascii")
        image_context = {
            "languageHints": language_hints,
            "textDetectionParams": {"enableTextDetectionConfidenceScore": True},
        }

        if mime_type == PDF_MIME_TYPE:
            url = f"{self.endpoint}/files:annotate"
            request = {
                "inputConfig": {"content": encoded, "mimeType": PDF_MIME_TYPE},
                "features": features,
                "imageContext": image_context,
                "pages": PDF_PAGES,
            }
        else:
            url = f"{self.endpoint}/images:annotate"
            request = {
                "image": {"content": encoded},
                "features": features,
                "imageContext": image_context,
            }

        data = _expect_dict(await self._post(url, {"requests": [request]}))
        responses = _expect_list(data.get("responses")) or [{}]
        result = _expect_dict(responses[0])

        if mime_type == PDF_MIME_TYPE:
            return self._fold_pages(result)

        self._raise_for_annotation_error(result)
        _check_bundle(result)
        return result

    async def check_connection(self) -> Dict[str, Any]:
        """Annotate a 1x1 image to verify key, quota and connectivity."""
        try:
            await self.annotate(
                base64.b64decode(_CHECK_IMAGE),
                "image/png",
                [{"type": "LABEL_DETECTION", "maxResults": 1}],
                ["en"],
            )
        except ExternalServiceError as e:
            logger.warning("Vision connectivity check failed (%s): %s", e.cause.value, e)
            return {"success": False, "cause": e.cause.value, "message": str(e)}
        return {"success": True, "message": "Vision API reachable", "endpoint": self.endpoint}

    async def _post(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                ServiceErrorCause.QUOTA,
                f"Vision API timed out after {self.timeout:.0f}s",
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                ServiceErrorCause.QUOTA,
                f"Vision API unavailable: {e}",
            ) from e

        if response.status_code != 200:
            message = _error_message(response)
            raise ExternalServiceError(
                classify_service_error(message, response.status_code),
                f"Vision API error {response.status_code}: {message}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(
                ServiceErrorCause.UNKNOWN,
                "Vision API returned a non-JSON response",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _raise_for_annotation_error(result: Dict[str, Any]) -> None:
        error = result.get("error")
        if error:
            message = error.get("message", "") if isinstance(error, dict) else str(error)
            raise ExternalServiceError(
                classify_service_error(message),
                f"Vision API error: {message}",
            )

    def _fold_pages(self, file_response: Dict[str, Any]) -> Dict[str, Any]:
        """Merge the per-page responses of files:annotate into one bundle."""
        self._raise_for_annotation_error(file_response)
        pages = [_expect_dict(page) for page in _expect_list(file_response.get("responses"))]

        texts: List[str] = []
        folded: Dict[str, Any] = {
            "logoAnnotations": [],
            "localizedObjectAnnotations": [],
            "labelAnnotations": [],
        }
        errors = []
        for page in pages:
            if page.get("error"):
                errors.append(page["error"])
                continue
            _check_bundle(page)
            page_text = (page.get("fullTextAnnotation") or {}).get("text")
            if page_text:
                texts.append(page_text)
            for key in folded:
                folded[key].extend(page.get(key) or [])
            if "imagePropertiesAnnotation" in page and "imagePropertiesAnnotation" not in folded:
                folded["imagePropertiesAnnotation"] = page["imagePropertiesAnnotation"]

        if pages and len(errors) == len(pages):
            self._raise_for_annotation_error({"error": errors[0]})

        if texts:
            folded["fullTextAnnotation"] = {"text": "\n".join(texts)}
        folded["totalPages"] = file_response.get("totalPages", len(pages))
        return folded


_ANNOTATION_LISTS = (
    "textAnnotations",
    "logoAnnotations",
    "localizedObjectAnnotations",
    "labelAnnotations",
)


def _unexpected_shape() -> ExternalServiceError:
    return ExternalServiceError(
        ServiceErrorCause.UNKNOWN,
        "Vision API returned an unexpected response shape",
    )


def _expect_dict(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise _unexpected_shape()
    return value


def _expect_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _unexpected_shape()
    return value


def _check_bundle(result: Dict[str, Any]) -> None:
    """Reject annotation bundles the extractor could not read."""
    full_text = result.get("fullTextAnnotation")
    if full_text is not None:
        if not isinstance(full_text, dict) or not isinstance(full_text.get("text", ""), str):
            raise _unexpected_shape()
    for key in _ANNOTATION_LISTS:
        if not all(isinstance(item, dict) for item in _expect_list(result.get(key))):
            raise _unexpected_shape()
    properties = result.get("imagePropertiesAnnotation")
    if properties is not None and not isinstance(properties, dict):
        raise _unexpected_shape()


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a Google API error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        status = error.get("status")
        message = error.get("message", "")
        return f"{status}: {message}" if status else message
    return response.text[:500]
