"""
Security Element Detector
=========================

Vision-side detection of seals, signatures and logos from logo, object and
label annotations, merged with the text-side findings. Every source is
additive: a flag set by any source stays set.
"""

import logging
from typing import List, Tuple

from .keywords import (
    LABEL_MIN_CONFIDENCE,
    LOGO_LABEL_KEYWORDS,
    LOGO_MIN_CONFIDENCE,
    OBJECT_MIN_CONFIDENCE,
    SEAL_LABEL_KEYWORDS,
    SEAL_OBJECT_KEYWORDS,
    SIGNATURE_LABEL_KEYWORDS,
    SIGNATURE_OBJECT_KEYWORDS,
)
from .models import (
    DetectedObject,
    ElementCategory,
    RawExtraction,
    SecurityElementSet,
)
from .text_patterns import TextPatternReport, analyze_text_patterns

logger = logging.getLogger(__name__)


def matches_any(name: str, keywords: Tuple[str, ...]) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in keywords)


def detect_vision_elements(extraction: RawExtraction) -> SecurityElementSet:
    elements = SecurityElementSet()

    for logo in extraction.logos:
        if logo.score > LOGO_MIN_CONFIDENCE:
            elements.add_logo(f"{logo.description} ({logo.percent}%)")
            logger.debug("Logo detected: %s - %d%%", logo.description, logo.percent)

    for obj in extraction.objects:
        if obj.score <= OBJECT_MIN_CONFIDENCE:
            continue
        if matches_any(obj.description, SEAL_OBJECT_KEYWORDS):
            elements.add_seal(f"{obj.description} ({obj.percent}%)")
            logger.debug("Possible seal object: %s - %d%%", obj.description, obj.percent)
        if matches_any(obj.description, SIGNATURE_OBJECT_KEYWORDS):
            elements.add_signature(f"{obj.description} ({obj.percent}%)")
            logger.debug("Possible signature object: %s - %d%%", obj.description, obj.percent)

    for label in extraction.labels:
        if label.score <= LABEL_MIN_CONFIDENCE:
            continue
        detail = f"Label: {label.description} ({label.percent}%)"
        if matches_any(label.description, SEAL_LABEL_KEYWORDS):
            elements.add_seal(detail)
        if matches_any(label.description, SIGNATURE_LABEL_KEYWORDS):
            elements.add_signature(detail)
        if matches_any(label.description, LOGO_LABEL_KEYWORDS):
            elements.add_logo(detail)

    return elements


def detect_security_elements(extraction: RawExtraction) -> Tuple[SecurityElementSet, TextPatternReport]:
    """
    Vision detection merged with text-pattern detection.

    The text analyzer only runs when extraction produced usable text; the
    returned report is empty otherwise.
    """
    elements = detect_vision_elements(extraction)
    report = TextPatternReport()

    if extraction.has_text:
        report = analyze_text_patterns(extraction.text)
        elements.merge(report.elements)

    logger.info(
        "Security elements - seals: %s, signatures: %s, logos: %s",
        elements.seals, elements.signatures, elements.logos,
    )
    return elements, report


def categorize(name: str) -> ElementCategory:
    if matches_any(name, SEAL_OBJECT_KEYWORDS):
        return ElementCategory.SEAL
    if matches_any(name, SIGNATURE_OBJECT_KEYWORDS):
        return ElementCategory.SIGNATURE
    if matches_any(name, LOGO_LABEL_KEYWORDS):
        return ElementCategory.LOGO
    return ElementCategory.OTHER


def categorize_objects(extraction: RawExtraction) -> List[DetectedObject]:
    """Logos and localized objects above threshold, each with a category."""
    detected = [
        DetectedObject(name=logo.description, confidence=logo.score, category=ElementCategory.LOGO)
        for logo in extraction.logos
        if logo.score > LOGO_MIN_CONFIDENCE
    ]
    detected.extend(
        DetectedObject(name=obj.description, confidence=obj.score, category=categorize(obj.description))
        for obj in extraction.objects
        if obj.score > OBJECT_MIN_CONFIDENCE
    )
    return detected
