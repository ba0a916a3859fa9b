"""
Text Pattern Analyzer
=====================

Finds security-element evidence in the extracted text itself:
- organization names (logo evidence)
- "name + title" lines (signature evidence)
- certification vocabulary (seal evidence, plus an informational point total)
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .keywords import CERTIFICATION_KEYWORDS, ORGANIZATION_PATTERNS, SIGNATURE_LINE_PATTERNS
from .models import SecurityElementSet

logger = logging.getLogger(__name__)


@dataclass
class TextPatternReport:
    elements: SecurityElementSet = field(default_factory=SecurityElementSet)
    certification_points: int = 0
    matched_keywords: List[str] = field(default_factory=list)


def is_signature_line(line: str) -> bool:
    return any(pattern.search(line) for pattern in SIGNATURE_LINE_PATTERNS)


def analyze_text_patterns(text: str) -> TextPatternReport:
    report = TextPatternReport()
    elements = report.elements

    for pattern, organization in ORGANIZATION_PATTERNS:
        if pattern.search(text):
            elements.add_logo(f"Organization detected: {organization} (text analysis)")
            logger.debug("Organization detected in text: %s", organization)

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if line and is_signature_line(line):
            elements.add_signature(f"Possible signature: {line} (text analysis)")
            logger.debug("Possible signature in text: %s", line)

    lowered = text.lower()
    for keyword, points in CERTIFICATION_KEYWORDS.items():
        if keyword in lowered:
            report.certification_points += points
            report.matched_keywords.append(keyword)
            elements.add_seal(f"Certification element: {keyword} (text analysis)")

    logger.debug(
        "Text patterns - organizations: %d, signatures: %d, certification points: %d",
        len(elements.logo_details), len(elements.signature_details), report.certification_points,
    )
    return report
