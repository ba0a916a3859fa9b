"""
Authenticity Engine Data Models
===============================

Request-scoped value objects for one document analysis:
- RawExtraction: normalized OCR/vision output
- QualityAssessment / TextMetrics: coarse quality flags
- SecurityElementSet: seals, signatures and logos with evidence strings
- GenerativeSignal: optional second opinion from a generative analyzer
- FusedResult / AuthenticityAnalysis: the verdict and everything behind it
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel


# ============================================================================
# CONSTANTS
# ============================================================================

PDF_MIME_TYPE = "application/pdf"

SUPPORTED_MIME_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/bmp",
    "image/webp",
    "image/tiff",
    PDF_MIME_TYPE,
)

NO_TEXT_PLACEHOLDER = (
    "No text could be extracted from the document. "
    "Verify that the document contains legible text."
)
PDF_FALLBACK_PLACEHOLDER = (
    "Text could not be extracted from this PDF. "
    "Upload the document as an image for a complete analysis."
)
PLACEHOLDER_TEXTS = frozenset({NO_TEXT_PLACEHOLDER, PDF_FALLBACK_PLACEHOLDER})


# ============================================================================
# ENUMERATIONS
# ============================================================================

class TextClarity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Resolution(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DocumentStructure(str, Enum):
    FORMAL = "formal"
    INFORMAL = "informal"
    DOUBTFUL = "doubtful"


class ElementCategory(str, Enum):
    """Category assigned to a localized object or logo."""
    SEAL = "seal"
    SIGNATURE = "signature"
    LOGO = "logo"
    OTHER = "other"


class GenerativeDocumentType(str, Enum):
    CERTIFICATE = "certificate"
    DIPLOMA = "diploma"
    TRANSCRIPT = "transcript"
    IDENTIFICATION = "identification"
    LETTER = "letter"
    OTHER = "other"


class Recommendation(str, Enum):
    ACCEPT = "accept"
    REVIEW = "review"
    REJECT = "reject"

    @property
    def label(self) -> str:
        """Human-readable verdict."""
        return _RECOMMENDATION_LABELS[self]


_RECOMMENDATION_LABELS = {
    Recommendation.ACCEPT: "ACCEPT - The document appears authentic",
    Recommendation.REVIEW: "REVIEW - The document requires manual review",
    Recommendation.REJECT: "REJECT - The document shows inconsistencies",
}

# Never computed from image metadata; kept as a fixed value.
DEFAULT_RESOLUTION = Resolution.MEDIUM


# ============================================================================
# INPUT / EXTRACTION
# ============================================================================

@dataclass(frozen=True)
class AnalysisInput:
    """Raw document bytes plus their declared mime type."""
    content: bytes
    mime_type: str

    @staticmethod
    def normalize_mime_type(mime_type: Optional[str]) -> str:
        if not mime_type:
            return ""
        return mime_type.split(";", 1)[0].strip().lower()

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE


@dataclass(frozen=True)
class Annotation:
    """A single logo, localized object or label annotation."""
    description: str
    score: float

    @property
    def percent(self) -> int:
        return to_percent(self.score)


def to_percent(score: float) -> int:
    """Confidence as a whole percentage, rounding halves up."""
    return int(score * 100 + 0.5)


@dataclass
class RawExtraction:
    """Normalized OCR/vision output for one document."""
    text: str
    logos: List[Annotation] = field(default_factory=list)
    objects: List[Annotation] = field(default_factory=list)
    labels: List[Annotation] = field(default_factory=list)
    image_properties: Dict[str, Any] = field(default_factory=dict)
    source: str = "vision"
    confidence: float = 1.0
    is_fallback: bool = False

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip()) and self.text not in PLACEHOLDER_TEXTS

    @property
    def usable_text(self) -> str:
        return self.text if self.has_text else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "logos": [{"description": a.description, "score": a.score} for a in self.logos],
            "objects": [{"name": a.description, "score": a.score} for a in self.objects],
            "labels": [{"description": a.description, "score": a.score} for a in self.labels],
            "image_properties": self.image_properties,
            "source": self.source,
            "confidence": self.confidence,
            "is_fallback": self.is_fallback,
        }


# ============================================================================
# QUALITY
# ============================================================================

@dataclass(frozen=True)
class QualityAssessment:
    text_clarity: TextClarity
    structure: DocumentStructure
    resolution: Resolution = DEFAULT_RESOLUTION

    def to_dict(self) -> Dict[str, str]:
        return {
            "text_clarity": self.text_clarity.value,
            "resolution": self.resolution.value,
            "structure": self.structure.value,
        }


@dataclass(frozen=True)
class TextMetrics:
    """Word/line statistics of the extracted text."""
    words: int
    characters: int
    lines: int
    avg_chars_per_word: float
    avg_words_per_line: float
    quality: TextClarity = TextClarity.LOW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "words": self.words,
            "characters": self.characters,
            "lines": self.lines,
            "avg_chars_per_word": self.avg_chars_per_word,
            "avg_words_per_line": self.avg_words_per_line,
            "quality": self.quality.value,
        }


# ============================================================================
# SECURITY ELEMENTS
# ============================================================================

@dataclass(frozen=True)
class SecurityFlags:
    """Frozen presence flags handed to fusion and returned to callers."""
    seals: bool
    signatures: bool
    logos: bool

    def to_dict(self) -> Dict[str, bool]:
        return {"seals": self.seals, "signatures": self.signatures, "logos": self.logos}


@dataclass
class SecurityElementSet:
    """
    Seals, signatures and logos found by the detectors.

    Detail lists are append-only evidence in detection order. Overlapping
    evidence from different detectors is kept as-is.
    """
    seals: bool = False
    signatures: bool = False
    logos: bool = False
    seal_details: List[str] = field(default_factory=list)
    signature_details: List[str] = field(default_factory=list)
    logo_details: List[str] = field(default_factory=list)

    def add_seal(self, detail: str) -> None:
        self.seals = True
        self.seal_details.append(detail)

    def add_signature(self, detail: str) -> None:
        self.signatures = True
        self.signature_details.append(detail)

    def add_logo(self, detail: str) -> None:
        self.logos = True
        self.logo_details.append(detail)

    def merge(self, other: "SecurityElementSet") -> "SecurityElementSet":
        """OR the flags, concatenate the evidence. Returns self."""
        self.seals = self.seals or other.seals
        self.signatures = self.signatures or other.signatures
        self.logos = self.logos or other.logos
        self.seal_details.extend(other.seal_details)
        self.signature_details.extend(other.signature_details)
        self.logo_details.extend(other.logo_details)
        return self

    def freeze(self) -> SecurityFlags:
        return SecurityFlags(seals=self.seals, signatures=self.signatures, logos=self.logos)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seals": self.seals,
            "signatures": self.signatures,
            "logos": self.logos,
            "seal_details": list(self.seal_details),
            "signature_details": list(self.signature_details),
            "logo_details": list(self.logo_details),
        }


@dataclass(frozen=True)
class DetectedObject:
    name: str
    confidence: float
    category: ElementCategory

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "confidence": self.confidence, "category": self.category.value}


# ============================================================================
# GENERATIVE SIGNAL
# ============================================================================

class GenerativeSignal(BaseModel):
    """
    Structured opinion of the generative document analyzer.

    Field names follow the camelCase JSON the model is asked to produce.
    Scores are clamped to 0..100 and counts floored at 0 rather than rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    has_signatures: bool
    signature_count: int = 0
    has_seals: bool
    seal_count: int = 0
    has_watermarks: bool = False
    format_consistency: float
    overall_security: float
    suspicious_elements: List[str] = Field(default_factory=list)
    document_type: GenerativeDocumentType = GenerativeDocumentType.OTHER
    authenticity_score: float

    _is_fallback: bool = PrivateAttr(default=False)

    @field_validator("format_consistency", "overall_security", "authenticity_score")
    @classmethod
    def clamp_percentage(cls, v: float) -> float:
        return min(100.0, max(0.0, v))

    @field_validator("signature_count", "seal_count")
    @classmethod
    def floor_count(cls, v: int) -> int:
        return max(0, v)

    @field_validator("suspicious_elements", mode="before")
    @classmethod
    def coerce_suspicious(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [item if isinstance(item, str) else str(item) for item in v]
        return v

    @field_validator("document_type", mode="before")
    @classmethod
    def coerce_document_type(cls, v: Any) -> Any:
        if isinstance(v, GenerativeDocumentType):
            return v
        value = str(v or "").strip().lower()
        known = {member.value for member in GenerativeDocumentType}
        return value if value in known else GenerativeDocumentType.OTHER.value

    @property
    def is_fallback(self) -> bool:
        return self._is_fallback

    def mark_fallback(self) -> "GenerativeSignal":
        self._is_fallback = True
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, mode="json")
        data["isFallback"] = self.is_fallback
        return data


# ============================================================================
# FUSION OUTPUT
# ============================================================================

@dataclass(frozen=True)
class ScoreBreakdown:
    vision_weight: float
    text_factor: float
    elements_factor: float
    quality_factor: float
    generative_factor: float
    hybrid_bonus: float
    vision_score: float
    generative_score_portion: float
    generative_present: bool
    suspicious_count: int
    word_count: int
    character_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vision_weight": self.vision_weight,
            "text_factor": self.text_factor,
            "elements_factor": self.elements_factor,
            "quality_factor": self.quality_factor,
            "generative_factor": self.generative_factor,
            "hybrid_bonus": self.hybrid_bonus,
            "vision_score": self.vision_score,
            "generative_score_portion": self.generative_score_portion,
            "generative_present": self.generative_present,
            "suspicious_count": self.suspicious_count,
            "word_count": self.word_count,
            "character_count": self.character_count,
        }


@dataclass(frozen=True)
class FusedResult:
    score: float
    recommendation: Recommendation
    elements: SecurityFlags
    breakdown: ScoreBreakdown

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "recommendation": self.recommendation.value,
            "recommendation_text": self.recommendation.label,
            "elements": self.elements.to_dict(),
            "breakdown": self.breakdown.to_dict(),
        }


@dataclass
class AuthenticityAnalysis:
    """Everything one analysis produced, for the caller to persist."""
    result: FusedResult
    extraction: RawExtraction
    quality: QualityAssessment
    elements: SecurityElementSet
    generative: Optional[GenerativeSignal]
    text_metrics: TextMetrics
    detected_objects: List[DetectedObject] = field(default_factory=list)
    certification_points: int = 0
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def score(self) -> float:
        return self.result.score

    @property
    def recommendation(self) -> Recommendation:
        return self.result.recommendation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.result.score,
            "recommendation": self.result.recommendation.value,
            "recommendation_text": self.result.recommendation.label,
            "result": self.result.to_dict(),
            "extraction": self.extraction.to_dict(),
            "quality": self.quality.to_dict(),
            "elements": self.elements.to_dict(),
            "generative": self.generative.to_dict() if self.generative is not None else None,
            "text_metrics": self.text_metrics.to_dict(),
            "detected_objects": [obj.to_dict() for obj in self.detected_objects],
            "certification_points": self.certification_points,
            "analyzed_at": self.analyzed_at.isoformat(),
        }
