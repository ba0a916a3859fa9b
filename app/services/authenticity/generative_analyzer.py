"""
Generative Document Analyzer
============================

Best-effort second opinion from a vision-language model.

The adapter never raises: transport failures, unparsable answers and PDF
inputs all produce the neutral fallback signal. Whether the adapter is
called at all is decided by `is_eligible`; an ineligible document simply has
no generative signal.
"""

import json
import logging
from dataclasses import replace
from typing import Optional

from pydantic import ValidationError

from .errors import GenerativeAnalysisError, ResponseParseError
from .generative_client import GenerativeClient
from .models import (
    AnalysisInput,
    GenerativeDocumentType,
    GenerativeSignal,
    QualityAssessment,
    SecurityElementSet,
)
from .quality_assessor import structure_from_format_consistency

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 20 * 1024 * 1024

ANALYSIS_PROMPT = """You are an expert in document forensics and authenticity verification of academic and professional certificates.
Analyze the attached document image and evaluate:
1. Handwritten signatures: are there any, and how many?
2. Official seals or stamps: are there any, and how many?
3. Watermarks or other printed security features.
4. Consistency of layout, typography and alignment (0-100).
5. Overall security level of the document (0-100).
6. Any element that looks altered, pasted, misaligned or otherwise suspicious.
7. The type of document.
8. An overall authenticity score (0-100).

Respond ONLY with a JSON object in this exact format, with no other text:
{
  "hasSignatures": true/false,
  "signatureCount": 0,
  "hasSeals": true/false,
  "sealCount": 0,
  "hasWatermarks": true/false,
  "formatConsistency": 0-100,
  "overallSecurity": 0-100,
  "suspiciousElements": ["short description of each suspicious element"],
  "documentType": "certificate|diploma|transcript|identification|letter|other",
  "authenticityScore": 0-100
}"""


def fallback_signal() -> GenerativeSignal:
    """Neutral signal used whenever the analyzer cannot give a real answer."""
    return GenerativeSignal(
        has_signatures=False,
        signature_count=0,
        has_seals=False,
        seal_count=0,
        has_watermarks=False,
        format_consistency=50,
        overall_security=30,
        suspicious_elements=[],
        document_type=GenerativeDocumentType.OTHER,
        authenticity_score=30,
    ).mark_fallback()


def extract_json_region(text: str) -> Optional[str]:
    """
    Return the first balanced {...} region of free text, or None.
    Braces inside JSON strings are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this brace; try the next opening brace
        start = text.find("{", start + 1)
    return None


def parse_structured_response(text: str) -> GenerativeSignal:
    """Parse the model's answer into a GenerativeSignal or raise ResponseParseError."""
    region = extract_json_region(text or "")
    if region is None:
        raise ResponseParseError("No JSON object found in generative response")

    try:
        data = json.loads(region)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in generative response: {e}") from e

    if not isinstance(data, dict):
        raise ResponseParseError("Generative response JSON is not an object")

    try:
        return GenerativeSignal.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(
            f"Generative response has an unexpected shape ({e.error_count()} errors)"
        ) from e


def is_eligible(
    client: Optional[GenerativeClient],
    document: AnalysisInput,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> bool:
    """Configured client, size under the inline limit, and not a PDF."""
    if client is None or not client.is_available:
        return False
    if document.size >= max_bytes:
        return False
    return not document.is_pdf


class GenerativeDocumentAnalyzer:
    """Asks the generative model for a structured opinion on one document."""

    def __init__(self, client: GenerativeClient):
        self.client = client

    async def analyze(self, document: AnalysisInput) -> GenerativeSignal:
        if document.is_pdf:
            logger.info("Generative analysis does not support PDF, using fallback signal")
            return fallback_signal()

        try:
            answer = await self.client.generate(ANALYSIS_PROMPT, document.content, document.mime_type)
            signal = parse_structured_response(answer)
        except (GenerativeAnalysisError, ResponseParseError) as e:
            logger.warning("Generative analysis failed, using fallback signal: %s", e)
            return fallback_signal()
        except Exception as e:
            logger.warning("Unexpected generative analysis failure, using fallback signal: %r", e)
            return fallback_signal()

        logger.info(
            "Generative analysis - score: %.0f, signatures: %d, seals: %d, suspicious: %d, type: %s",
            signal.authenticity_score, signal.signature_count, signal.seal_count,
            len(signal.suspicious_elements), signal.document_type.value,
        )
        return signal


def apply_generative_signal(
    elements: SecurityElementSet,
    quality: QualityAssessment,
    signal: GenerativeSignal,
) -> QualityAssessment:
    """
    Fold the generative signal into the element set (in place) and return the
    quality assessment with its structure replaced by the one implied by
    format consistency.
    """
    if signal.has_signatures and signal.signature_count > 0 and not elements.signatures:
        elements.add_signature(f"{signal.signature_count} signature(s) detected by secondary analyzer")
    if signal.has_seals and signal.seal_count > 0 and not elements.seals:
        elements.add_seal(f"{signal.seal_count} seal(s) detected by secondary analyzer")

    return replace(quality, structure=structure_from_format_consistency(signal.format_consistency))
