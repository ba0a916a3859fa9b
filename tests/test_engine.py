"""
Authenticity Engine Tests
=========================

End-to-end analyses over fake Vision / Gemini clients.
"""

import pytest

from app.core.config import Settings
from app.services.authenticity import (
    AuthenticityEngine,
    AuthenticityServices,
    DocumentStructure,
    EmptyInput,
    ExternalServiceError,
    Recommendation,
    ServiceErrorCause,
    TextClarity,
    UnsupportedMediaType,
    build_services,
)
from app.services.authenticity.models import PDF_FALLBACK_PLACEHOLDER

from conftest import PDF_BYTES, PNG_BYTES, FakeGenerativeClient, FakeVisionClient


class TestVisionOnlyAnalysis:

    @pytest.mark.asyncio
    async def test_certificate(self, engine, rich_vision_client):
        analysis = await engine.analyze(PNG_BYTES, "image/png")

        assert len(rich_vision_client.calls) == 1
        assert analysis.quality.text_clarity == TextClarity.HIGH
        assert analysis.quality.structure == DocumentStructure.FORMAL
        assert analysis.text_metrics.quality == TextClarity.HIGH

        elements = analysis.elements
        assert elements.seal_details[0] == "Official Seal (65%)"
        assert "Label: Handwriting (72%)" in elements.signature_details
        assert "Possible signature: Rector: Juan Carlos Pérez (text analysis)" in elements.signature_details
        assert elements.logo_details[0] == "Universidad del Valle (87%)"

        breakdown = analysis.result.breakdown
        assert breakdown.text_factor == 30
        assert breakdown.elements_factor == 15 + 12 + 10
        assert breakdown.quality_factor == 15
        assert analysis.score == pytest.approx(57.4)
        assert analysis.recommendation == Recommendation.REVIEW
        assert analysis.generative is None
        assert analysis.certification_points == 12

    @pytest.mark.asyncio
    async def test_minimal_text(self, settings):
        client = FakeVisionClient(response={"fullTextAnnotation": {"text": "Hello world"}})
        engine = AuthenticityEngine(client, None, settings)

        analysis = await engine.analyze(PNG_BYTES, "image/jpeg")

        assert analysis.quality.text_clarity == TextClarity.LOW
        assert analysis.quality.structure == DocumentStructure.DOUBTFUL
        assert analysis.score == pytest.approx((5 + 0 + 3) * 0.7)
        assert analysis.recommendation == Recommendation.REJECT
        assert analysis.text_metrics.words == 2

    @pytest.mark.asyncio
    async def test_image_without_text(self, settings):
        client = FakeVisionClient(response={"localizedObjectAnnotations": [{"name": "Stamp", "score": 0.8}]})
        engine = AuthenticityEngine(client, None, settings)

        analysis = await engine.analyze(PNG_BYTES, "image/png")

        assert not analysis.extraction.has_text
        assert analysis.elements.seal_details == ["Stamp (80%)"]
        assert analysis.result.breakdown.word_count == 0
        assert analysis.text_metrics.words == 0
        assert analysis.certification_points == 0

    @pytest.mark.asyncio
    async def test_detected_objects_are_categorized(self, engine):
        analysis = await engine.analyze(PNG_BYTES, "image/png")

        assert [(d.name, d.category.value) for d in analysis.detected_objects] == [
            ("Universidad del Valle", "logo"),
            ("Official Seal", "seal"),
            ("Person", "other"),
        ]


class TestHybridAnalysis:

    @pytest.mark.asyncio
    async def test_certificate_with_generative_signal(self, hybrid_engine, generative_client):
        analysis = await hybrid_engine.analyze(PNG_BYTES, "image/png")

        assert len(generative_client.calls) == 1
        assert analysis.generative is not None
        assert not analysis.generative.is_fallback

        breakdown = analysis.result.breakdown
        assert breakdown.generative_present
        assert breakdown.vision_weight == 0.4
        assert breakdown.generative_factor == 60
        assert breakdown.hybrid_bonus == 5 + 5 + 8
        assert analysis.score == pytest.approx(86.8)
        assert analysis.recommendation == Recommendation.ACCEPT

    @pytest.mark.asyncio
    async def test_malformed_answer_counts_as_present_fallback(self, rich_vision_client, settings):
        generative = FakeGenerativeClient(answer="I am unable to evaluate this document.")
        engine = AuthenticityEngine(rich_vision_client, generative, settings)

        analysis = await engine.analyze(PNG_BYTES, "image/png")

        assert analysis.generative.is_fallback
        assert analysis.result.breakdown.generative_present
        assert analysis.quality.structure == DocumentStructure.DOUBTFUL
        # (30 + 37 + 3) * 0.4 + (30 * 0.4 + 50 * 0.2) * 0.6
        assert analysis.score == pytest.approx(41.2)
        assert analysis.recommendation == Recommendation.REJECT

    @pytest.mark.asyncio
    async def test_timeout_uses_fallback(self, rich_vision_client):
        settings = Settings(_env_file=None, generative_timeout_seconds=0.05)
        generative = FakeGenerativeClient(delay=1.0)
        engine = AuthenticityEngine(rich_vision_client, generative, settings)

        analysis = await engine.analyze(PNG_BYTES, "image/png")

        assert analysis.generative is not None
        assert analysis.generative.is_fallback

    @pytest.mark.asyncio
    async def test_oversized_image_skips_generative(self, rich_vision_client):
        settings = Settings(_env_file=None, generative_max_bytes=len(PNG_BYTES))
        generative = FakeGenerativeClient()
        engine = AuthenticityEngine(rich_vision_client, generative, settings)

        analysis = await engine.analyze(PNG_BYTES, "image/png")

        assert analysis.generative is None
        assert generative.calls == []
        assert analysis.result.breakdown.vision_weight == 0.7

    @pytest.mark.asyncio
    async def test_unavailable_client_skips_generative(self, rich_vision_client, settings):
        generative = FakeGenerativeClient(available=False)
        engine = AuthenticityEngine(rich_vision_client, generative, settings)

        analysis = await engine.analyze(PNG_BYTES, "image/png")

        assert analysis.generative is None
        assert generative.calls == []


class TestPdfAnalysis:

    @pytest.mark.asyncio
    async def test_unreadable_pdf_degrades(self, settings):
        vision = FakeVisionClient(error=ExternalServiceError(ServiceErrorCause.MALFORMED_INPUT, "Bad image data."))
        generative = FakeGenerativeClient()
        engine = AuthenticityEngine(vision, generative, settings)

        analysis = await engine.analyze(PDF_BYTES, "application/pdf")

        assert analysis.extraction.is_fallback
        assert analysis.extraction.text == PDF_FALLBACK_PLACEHOLDER
        assert analysis.quality.text_clarity == TextClarity.LOW
        assert analysis.quality.structure == DocumentStructure.DOUBTFUL
        assert not analysis.elements.seals
        assert not analysis.elements.signatures
        assert not analysis.elements.logos
        assert analysis.generative is None
        assert generative.calls == []
        assert analysis.score == pytest.approx((5 + 0 + 3) * 0.7)
        assert analysis.recommendation == Recommendation.REJECT

    @pytest.mark.asyncio
    async def test_readable_pdf(self, settings):
        vision = FakeVisionClient(response={"fullTextAnnotation": {"text": "Diploma de grado\nUniversidad del Valle"}})
        engine = AuthenticityEngine(vision, None, settings)

        analysis = await engine.analyze(PDF_BYTES, "application/pdf")

        assert not analysis.extraction.is_fallback
        assert analysis.extraction.source == "vision_pdf"
        assert analysis.quality.structure == DocumentStructure.INFORMAL
        assert analysis.elements.seals


class TestInputErrors:

    @pytest.mark.asyncio
    async def test_unsupported_type(self, engine, rich_vision_client):
        with pytest.raises(UnsupportedMediaType):
            await engine.analyze(b"hello", "text/plain")
        assert rich_vision_client.calls == []

    @pytest.mark.asyncio
    async def test_empty_document(self, engine):
        with pytest.raises(EmptyInput):
            await engine.analyze(b"", "image/png")

    @pytest.mark.asyncio
    async def test_image_ocr_failure_propagates(self, settings):
        vision = FakeVisionClient(error=ExternalServiceError(ServiceErrorCause.PERMISSION, "API key not valid"))
        engine = AuthenticityEngine(vision, None, settings)

        with pytest.raises(ExternalServiceError) as exc_info:
            await engine.analyze(PNG_BYTES, "image/png")
        assert exc_info.value.cause == ServiceErrorCause.PERMISSION


class TestAnalysisSerialization:

    @pytest.mark.asyncio
    async def test_to_dict(self, hybrid_engine):
        analysis = await hybrid_engine.analyze(PNG_BYTES, "image/png")

        data = analysis.to_dict()

        assert data["recommendation"] == "accept"
        assert data["recommendation_text"] == "ACCEPT - The document appears authentic"
        assert data["result"]["breakdown"]["generative_present"] is True
        assert data["generative"]["documentType"] == "certificate"
        assert data["extraction"]["objects"][0] == {"name": "Official Seal", "score": 0.65}
        assert data["quality"] == {"text_clarity": "high", "resolution": "medium", "structure": "formal"}
        assert set(data["elements"]) >= {"seals", "seal_details", "signatures", "logos"}


class TestServices:

    @pytest.mark.asyncio
    async def test_aclose_closes_clients(self, engine, rich_vision_client):
        services = AuthenticityServices(engine, rich_vision_client, None)

        await services.aclose()

        assert rich_vision_client.closed

    @pytest.mark.asyncio
    async def test_build_services_without_keys(self):
        services = build_services(Settings(_env_file=None, google_vision_api_key="", gemini_api_key=""))

        assert not services.vision_client.is_available
        assert services.generative_client is None
        assert services.engine.generative_analyzer is None
        await services.aclose()

    @pytest.mark.asyncio
    async def test_build_services_with_gemini(self):
        services = build_services(Settings(_env_file=None, google_vision_api_key="v", gemini_api_key="g"))

        assert services.vision_client.is_available
        assert services.generative_client is not None
        assert services.generative_client.is_available
        await services.aclose()
