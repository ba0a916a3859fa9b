"""
Authenticity Engine
===================

Orchestrates one analysis:

    validate -> OCR -> quality -> elements (vision + text)
             -> generative (optional, best-effort) -> merge -> fuse

Holds no per-request state, so one engine serves concurrent analyses.
"""

import asyncio
import logging
from typing import Optional

from app.core.config import Settings, get_settings

from .element_detector import categorize_objects, detect_security_elements
from .generative_analyzer import (
    GenerativeDocumentAnalyzer,
    apply_generative_signal,
    fallback_signal,
    is_eligible,
)
from .generative_client import GeminiClient, GenerativeClient
from .models import AnalysisInput, AuthenticityAnalysis, GenerativeSignal
from .quality_assessor import assess_quality, compute_text_metrics
from .score_fusion import fuse_scores
from .vision_client import GoogleVisionClient, VisionClient
from .vision_extractor import VisionExtractor, validate_input

logger = logging.getLogger(__name__)


class AuthenticityEngine:
    """
    Document authenticity analysis over injected OCR and generative clients.

    Usage:
        engine = AuthenticityEngine(vision_client, generative_client)
        analysis = await engine.analyze(content, "image/png")
        print(analysis.score, analysis.recommendation)
    """

    def __init__(
        self,
        vision_client: VisionClient,
        generative_client: Optional[GenerativeClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.vision_client = vision_client
        self.generative_client = generative_client
        self.extractor = VisionExtractor(vision_client)
        self.generative_analyzer = (
            GenerativeDocumentAnalyzer(generative_client) if generative_client is not None else None
        )

    async def analyze(self, content: bytes, mime_type: str) -> AuthenticityAnalysis:
        document = validate_input(content, mime_type)

        extraction = await self.extractor.extract(document)
        quality = assess_quality(extraction)
        elements, text_report = detect_security_elements(extraction)

        generative = await self._generative_signal(document)
        if generative is not None:
            quality = apply_generative_signal(elements, quality, generative)

        text = extraction.usable_text
        result = fuse_scores(quality, elements, text, generative)

        logger.info(
            "Authenticity analysis - type: %s, score: %.1f, recommendation: %s, generative: %s",
            document.mime_type,
            result.score,
            result.recommendation.value,
            "fallback" if generative is not None and generative.is_fallback
            else ("yes" if generative is not None else "no"),
        )

        return AuthenticityAnalysis(
            result=result,
            extraction=extraction,
            quality=quality,
            elements=elements,
            generative=generative,
            text_metrics=compute_text_metrics(text),
            detected_objects=categorize_objects(extraction),
            certification_points=text_report.certification_points,
        )

    async def _generative_signal(self, document: AnalysisInput) -> Optional[GenerativeSignal]:
        if self.generative_analyzer is None:
            return None
        if not is_eligible(self.generative_client, document, self.settings.generative_max_bytes):
            logger.debug("Document not eligible for generative analysis")
            return None

        try:
            return await asyncio.wait_for(
                self.generative_analyzer.analyze(document),
                timeout=self.settings.generative_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Generative analysis timed out after %.0fs, using fallback signal",
                self.settings.generative_timeout_seconds,
            )
            return fallback_signal()


class AuthenticityServices:
    """Engine plus the clients it owns, for lifespan-scoped startup/shutdown."""

    def __init__(
        self,
        engine: AuthenticityEngine,
        vision_client: GoogleVisionClient,
        generative_client: Optional[GeminiClient] = None,
    ):
        self.engine = engine
        self.vision_client = vision_client
        self.generative_client = generative_client

    async def aclose(self) -> None:
        await self.vision_client.aclose()
        if self.generative_client is not None:
            await self.generative_client.aclose()


def build_services(settings: Optional[Settings] = None) -> AuthenticityServices:
    """Construct the real Google Vision / Gemini clients from settings."""
    settings = settings or get_settings()

    vision_client = GoogleVisionClient(
        api_key=settings.google_vision_api_key,
        endpoint=settings.google_vision_endpoint,
        timeout=settings.ocr_timeout_seconds,
    )
    generative_client = None
    if settings.generative_configured:
        generative_client = GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            endpoint=settings.gemini_endpoint,
            timeout=settings.generative_timeout_seconds,
        )

    logger.info(
        "Authenticity services initialized: Vision=%s, Gemini=%s",
        vision_client.is_available, generative_client is not None,
    )
    engine = AuthenticityEngine(vision_client, generative_client, settings)
    return AuthenticityServices(engine, vision_client, generative_client)
