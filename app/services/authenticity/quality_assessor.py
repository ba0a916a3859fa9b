"""
Quality Assessor
================

Coarse text-clarity and document-structure flags derived from the extracted
text and the vision annotations. Resolution is not measured and stays at
DEFAULT_RESOLUTION.
"""

from .keywords import (
    CERTIFICATE_STRUCTURE_KEYWORDS,
    FORMALITY_KEYWORDS,
    FORMALITY_MIN_MATCHES,
    LOGO_MIN_CONFIDENCE,
)
from .models import (
    DEFAULT_RESOLUTION,
    DocumentStructure,
    QualityAssessment,
    RawExtraction,
    TextClarity,
    TextMetrics,
)


def count_words(text: str) -> int:
    return len(text.split())


def text_clarity(text: str) -> TextClarity:
    words = count_words(text)
    chars = len(text)
    if words > 50 and chars > 300:
        return TextClarity.HIGH
    if words > 20 and chars > 100:
        return TextClarity.MEDIUM
    return TextClarity.LOW


def has_formal_text(text: str) -> bool:
    lowered = text.lower()
    matches = sum(1 for keyword in FORMALITY_KEYWORDS if keyword in lowered)
    return matches >= FORMALITY_MIN_MATCHES


def has_certificate_structure(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in CERTIFICATE_STRUCTURE_KEYWORDS)


def has_logo_signal(extraction: RawExtraction) -> bool:
    return any(logo.score > LOGO_MIN_CONFIDENCE for logo in extraction.logos)


def document_structure(extraction: RawExtraction) -> DocumentStructure:
    text = extraction.usable_text
    formal = has_formal_text(text)
    certificate = has_certificate_structure(text)

    if formal and has_logo_signal(extraction) and certificate:
        return DocumentStructure.FORMAL
    if formal or certificate:
        return DocumentStructure.INFORMAL
    return DocumentStructure.DOUBTFUL


def structure_from_format_consistency(format_consistency: float) -> DocumentStructure:
    """Structure class implied by the generative analyzer's format score."""
    if format_consistency > 80:
        return DocumentStructure.FORMAL
    if format_consistency > 50:
        return DocumentStructure.INFORMAL
    return DocumentStructure.DOUBTFUL


def assess_quality(extraction: RawExtraction) -> QualityAssessment:
    """Quality flags for an extraction; no usable text means low/doubtful."""
    if not extraction.has_text:
        return QualityAssessment(
            text_clarity=TextClarity.LOW,
            structure=DocumentStructure.DOUBTFUL,
            resolution=DEFAULT_RESOLUTION,
        )

    return QualityAssessment(
        text_clarity=text_clarity(extraction.text),
        structure=document_structure(extraction),
        resolution=DEFAULT_RESOLUTION,
    )


def metrics_quality(words: int, chars: int) -> TextClarity:
    """Looser bands than text_clarity; reported with the metrics only."""
    if words > 50 and chars > 200:
        return TextClarity.HIGH
    if words > 10 and chars > 50:
        return TextClarity.MEDIUM
    return TextClarity.LOW


def compute_text_metrics(text: str) -> TextMetrics:
    words = count_words(text)
    characters = len(text)
    lines = len([line for line in text.split("\n") if line.strip()])

    return TextMetrics(
        words=words,
        characters=characters,
        lines=lines,
        avg_chars_per_word=round(characters / words, 2) if words else 0.0,
        avg_words_per_line=round(words / lines, 2) if lines else 0.0,
        quality=metrics_quality(words, characters),
    )
