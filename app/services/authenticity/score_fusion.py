"""
Hybrid Score Fusion
===================

Deterministic combination of the heuristic vision signals and the optional
generative signal into one 0-100 score and a recommendation. No I/O.

    vision_score     = (text + elements + quality) * vision_weight
    generative_part  = generative_factor * 0.6        (only when present)
    score            = clamp(vision_score + generative_part + hybrid_bonus)
"""

from typing import Optional

from .models import (
    DocumentStructure,
    FusedResult,
    GenerativeDocumentType,
    GenerativeSignal,
    QualityAssessment,
    Recommendation,
    ScoreBreakdown,
    SecurityElementSet,
    TextClarity,
)

# Weights
VISION_WEIGHT_HYBRID = 0.4
VISION_WEIGHT_ALONE = 0.7
GENERATIVE_WEIGHT = 0.6

# Element factor: points per evidence entry, capped
SEAL_POINTS, SEAL_CAP = 5, 15
SIGNATURE_POINTS, SIGNATURE_CAP = 4, 12
LOGO_POINTS, LOGO_CAP = 3, 10

QUALITY_POINTS = {
    DocumentStructure.FORMAL: 15,
    DocumentStructure.INFORMAL: 8,
    DocumentStructure.DOUBTFUL: 3,
}

# Generative factor
GENERATIVE_CAP = 60
AUTHENTICITY_WEIGHT = 0.4
CONSISTENCY_WEIGHT = 0.2
POINTS_PER_SIGNATURE = 8
POINTS_PER_SEAL = 10
WATERMARK_POINTS = 12
SUSPICIOUS_PENALTY = 5

# Agreement bonuses
AGREEMENT_BONUS = 5
DOCUMENT_TYPE_BONUS = 8

# Recommendation thresholds (inclusive lower bounds)
HYBRID_ACCEPT = 80
HYBRID_REVIEW = 60
VISION_ACCEPT = 75
VISION_REVIEW = 45


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def text_factor(quality: QualityAssessment, words: int, chars: int) -> float:
    if quality.text_clarity == TextClarity.HIGH and words > 50 and chars > 200:
        return 30
    if quality.text_clarity == TextClarity.MEDIUM and words > 20:
        return 20
    if words > 10:
        return 12
    return 5


def elements_factor(elements: SecurityElementSet) -> float:
    factor = 0
    if elements.seals:
        factor += min(SEAL_CAP, len(elements.seal_details) * SEAL_POINTS)
    if elements.signatures:
        factor += min(SIGNATURE_CAP, len(elements.signature_details) * SIGNATURE_POINTS)
    if elements.logos:
        factor += min(LOGO_CAP, len(elements.logo_details) * LOGO_POINTS)
    return factor


def quality_factor(quality: QualityAssessment) -> float:
    return QUALITY_POINTS[quality.structure]


def generative_factor(signal: GenerativeSignal) -> float:
    adjustment = 0
    if signal.has_signatures and signal.signature_count > 0:
        adjustment += signal.signature_count * POINTS_PER_SIGNATURE
    if signal.has_seals and signal.seal_count > 0:
        adjustment += signal.seal_count * POINTS_PER_SEAL
    if signal.has_watermarks:
        adjustment += WATERMARK_POINTS

    penalty = len(signal.suspicious_elements) * SUSPICIOUS_PENALTY
    consistency = signal.format_consistency * CONSISTENCY_WEIGHT
    raw = signal.authenticity_score * AUTHENTICITY_WEIGHT + adjustment + consistency - penalty
    return clamp(raw, 0, GENERATIVE_CAP)


def hybrid_bonus(elements: SecurityElementSet, text: str, signal: GenerativeSignal) -> float:
    lowered = text.lower()
    bonus = 0
    if elements.signatures and signal.has_signatures:
        bonus += AGREEMENT_BONUS
    if elements.seals and signal.has_seals:
        bonus += AGREEMENT_BONUS
    if signal.document_type == GenerativeDocumentType.CERTIFICATE and "certificado" in lowered:
        bonus += DOCUMENT_TYPE_BONUS
    if signal.document_type == GenerativeDocumentType.DIPLOMA and "diploma" in lowered:
        bonus += DOCUMENT_TYPE_BONUS
    return bonus


def recommend(score: float, generative_present: bool, suspicious_count: int) -> Recommendation:
    if generative_present:
        if score >= HYBRID_ACCEPT and suspicious_count == 0:
            return Recommendation.ACCEPT
        if score >= HYBRID_REVIEW:
            return Recommendation.REVIEW
        return Recommendation.REJECT

    if score >= VISION_ACCEPT:
        return Recommendation.ACCEPT
    if score >= VISION_REVIEW:
        return Recommendation.REVIEW
    return Recommendation.REJECT


def fuse_scores(
    quality: QualityAssessment,
    elements: SecurityElementSet,
    text: str,
    generative: Optional[GenerativeSignal] = None,
) -> FusedResult:
    """Combine all signals into the final score and recommendation."""
    words = len(text.split())
    chars = len(text)
    present = generative is not None

    vision_weight = VISION_WEIGHT_HYBRID if present else VISION_WEIGHT_ALONE
    text_points = text_factor(quality, words, chars)
    element_points = elements_factor(elements)
    quality_points = quality_factor(quality)

    if present:
        gen_points = generative_factor(generative)
        bonus = hybrid_bonus(elements, text, generative)
        suspicious = len(generative.suspicious_elements)
    else:
        gen_points = 0
        bonus = 0
        suspicious = 0

    vision_score = (text_points + element_points + quality_points) * vision_weight
    generative_portion = gen_points * (GENERATIVE_WEIGHT if present else 0)
    score = clamp(vision_score + generative_portion + bonus)

    return FusedResult(
        score=score,
        recommendation=recommend(score, present, suspicious),
        elements=elements.freeze(),
        breakdown=ScoreBreakdown(
            vision_weight=vision_weight,
            text_factor=text_points,
            elements_factor=element_points,
            quality_factor=quality_points,
            generative_factor=gen_points,
            hybrid_bonus=bonus,
            vision_score=vision_score,
            generative_score_portion=generative_portion,
            generative_present=present,
            suspicious_count=suspicious,
            word_count=words,
            character_count=chars,
        ),
    )
