"""
Document Authenticity Engine
============================

Turns an uploaded document image or PDF into a trust judgment: extracted
text, detected seals / signatures / logos, a 0-100 authenticity score and an
accept / review / reject recommendation.

Architecture:
- VisionExtractor: OCR + annotations from Google Cloud Vision
- QualityAssessor: text clarity and document structure flags
- SecurityElementDetector + TextPatternAnalyzer: seal / signature / logo evidence
- GenerativeDocumentAnalyzer: optional Gemini second opinion
- HybridScoreFusion: deterministic score and recommendation

Usage:
    from app.services.authenticity import AuthenticityEngine

    engine = AuthenticityEngine(vision_client, generative_client)
    analysis = await engine.analyze(content, "image/jpeg")

    print(f"Score: {analysis.score}")
    print(f"Recommendation: {analysis.recommendation.label}")
"""

from .engine import AuthenticityEngine, AuthenticityServices, build_services
from .errors import (
    AuthenticityError,
    EmptyInput,
    ExternalServiceError,
    GenerativeAnalysisError,
    ResponseParseError,
    ServiceErrorCause,
    UnsupportedMediaType,
)
from .models import (
    SUPPORTED_MIME_TYPES,
    AnalysisInput,
    Annotation,
    AuthenticityAnalysis,
    DocumentStructure,
    FusedResult,
    GenerativeDocumentType,
    GenerativeSignal,
    QualityAssessment,
    RawExtraction,
    Recommendation,
    SecurityElementSet,
    TextClarity,
)
from .score_fusion import fuse_scores, recommend
from .generative_analyzer import parse_structured_response
from .generative_client import GeminiClient
from .vision_client import GoogleVisionClient

__all__ = [
    "AuthenticityEngine",
    "AuthenticityServices",
    "build_services",
    # Errors
    "AuthenticityError",
    "EmptyInput",
    "ExternalServiceError",
    "GenerativeAnalysisError",
    "ResponseParseError",
    "ServiceErrorCause",
    "UnsupportedMediaType",
    # Models
    "SUPPORTED_MIME_TYPES",
    "AnalysisInput",
    "Annotation",
    "AuthenticityAnalysis",
    "DocumentStructure",
    "FusedResult",
    "GenerativeDocumentType",
    "GenerativeSignal",
    "QualityAssessment",
    "RawExtraction",
    "Recommendation",
    "SecurityElementSet",
    "TextClarity",
    # Functions
    "fuse_scores",
    "recommend",
    "parse_structured_response",
    # Clients
    "GeminiClient",
    "GoogleVisionClient",
]
