"""
Vision Extractor
================

Sends document bytes to the OCR/vision backend and normalizes the response
into a RawExtraction.

Images: one combined request; backend errors propagate.
PDFs: same request, but any error or empty text yields the basic fallback
extraction instead of an exception.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from .errors import EmptyInput, ExternalServiceError, UnsupportedMediaType
from .models import (
    NO_TEXT_PLACEHOLDER,
    PDF_FALLBACK_PLACEHOLDER,
    SUPPORTED_MIME_TYPES,
    AnalysisInput,
    Annotation,
    RawExtraction,
)
from .vision_client import VisionClient

logger = logging.getLogger(__name__)

VISION_FEATURES: List[Dict[str, Any]] = [
    {"type": "TEXT_DETECTION", "maxResults": 1},
    {"type": "DOCUMENT_TEXT_DETECTION", "maxResults": 1},
    {"type": "LOGO_DETECTION", "maxResults": 10},
    {"type": "OBJECT_LOCALIZATION", "maxResults": 20},
    {"type": "LABEL_DETECTION", "maxResults": 15},
    {"type": "IMAGE_PROPERTIES", "maxResults": 1},
]
LANGUAGE_HINTS = ["es", "en"]

FALLBACK_CONFIDENCE = 0.1

_BLANK_LINES = re.compile(r"\n{3,}")
_HORIZONTAL_SPACE = re.compile(r"[ \t]{2,}")


def validate_input(content: Optional[bytes], mime_type: Optional[str]) -> AnalysisInput:
    """Check mime type, then size. Returns the normalized AnalysisInput."""
    normalized = AnalysisInput.normalize_mime_type(mime_type)
    if normalized not in SUPPORTED_MIME_TYPES:
        raise UnsupportedMediaType(normalized or (mime_type or ""), SUPPORTED_MIME_TYPES)
    if not content:
        raise EmptyInput()
    return AnalysisInput(content=bytes(content), mime_type=normalized)


def clean_text(raw: Optional[str]) -> str:
    """Normalize line breaks and whitespace of OCR output."""
    if not raw or not raw.strip():
        return NO_TEXT_PLACEHOLDER

    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    text = _BLANK_LINES.sub("\n\n", text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    return text.strip()


def text_from_response(response: Dict[str, Any]) -> str:
    """Prefer DOCUMENT_TEXT_DETECTION output, then TEXT_DETECTION, then the placeholder."""
    full_text = (response.get("fullTextAnnotation") or {}).get("text")
    if full_text:
        logger.debug("Text from DOCUMENT_TEXT_DETECTION (%d chars)", len(full_text))
        return clean_text(full_text)

    text_annotations = response.get("textAnnotations") or []
    if text_annotations and text_annotations[0].get("description"):
        description = text_annotations[0]["description"]
        logger.debug("Text from TEXT_DETECTION (%d chars)", len(description))
        return clean_text(description)

    logger.info("No text detected in document")
    return NO_TEXT_PLACEHOLDER


def _annotations(items: Optional[List[Dict[str, Any]]], name_key: str) -> List[Annotation]:
    result = []
    for item in items or []:
        name = item.get(name_key) or ""
        try:
            score = float(item.get("score", 0.0) or 0.0)
        except (TypeError, ValueError):
            score = 0.0
        result.append(Annotation(description=name, score=score))
    return result


def extraction_from_response(response: Dict[str, Any], source: str = "vision") -> RawExtraction:
    """Normalize one annotation bundle."""
    return RawExtraction(
        text=text_from_response(response),
        logos=_annotations(response.get("logoAnnotations"), "description"),
        objects=_annotations(response.get("localizedObjectAnnotations"), "name"),
        labels=_annotations(response.get("labelAnnotations"), "description"),
        image_properties=response.get("imagePropertiesAnnotation") or {},
        source=source,
    )


def basic_fallback_extraction() -> RawExtraction:
    """Low-confidence but valid extraction for unreadable PDFs."""
    return RawExtraction(
        text=PDF_FALLBACK_PLACEHOLDER,
        source="pdf_fallback",
        confidence=FALLBACK_CONFIDENCE,
        is_fallback=True,
    )


class VisionExtractor:
    """Runs the OCR/vision request for one document."""

    def __init__(self, client: VisionClient):
        self.client = client

    async def extract(self, document: AnalysisInput) -> RawExtraction:
        logger.info(
            "Vision extraction - type: %s, size: %d bytes",
            document.mime_type, document.size,
        )
        if document.is_pdf:
            return await self._extract_pdf(document)

        response = await self.client.annotate(
            document.content, document.mime_type, VISION_FEATURES, LANGUAGE_HINTS,
        )
        extraction = extraction_from_response(response)
        logger.info(
            "Vision extraction complete - text: %d chars, logos: %d, objects: %d, labels: %d",
            len(extraction.text), len(extraction.logos),
            len(extraction.objects), len(extraction.labels),
        )
        return extraction

    async def _extract_pdf(self, document: AnalysisInput) -> RawExtraction:
        try:
            response = await self.client.annotate(
                document.content, document.mime_type, VISION_FEATURES, LANGUAGE_HINTS,
            )
            extraction = extraction_from_response(response, source="vision_pdf")
        except ExternalServiceError as e:
            logger.warning("PDF OCR failed (%s), using basic fallback: %s", e.cause.value, e)
            return basic_fallback_extraction()
        except Exception as e:
            logger.warning("Unexpected PDF OCR failure, using basic fallback: %r", e)
            return basic_fallback_extraction()

        if not extraction.has_text:
            logger.warning("PDF OCR returned no usable text, using basic fallback")
            return basic_fallback_extraction()
        return extraction
