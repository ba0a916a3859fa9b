"""
DocuValle - Shared Test Fixtures
Fake OCR / generative clients, canned Vision payloads and an API client.
"""

import asyncio
import os
import json
from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport

# Configure test environment BEFORE importing app
os.environ["GOOGLE_VISION_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["TESTING"] = "true"

from app.main import app
from app.core.config import Settings
from app.routers.authenticity import get_authenticity_services
from app.services.authenticity import AuthenticityEngine, AuthenticityServices


# =============================================================================
# Sample Documents
# =============================================================================

CERTIFICATE_TEXT = """UNIVERSIDAD DEL VALLE
Microsoft Learn Student Ambassadors


CERTIFICADO
Otorgado a:    Ana María Torres
En reconocimiento por su participación en el programa de formación en Azure
realizado durante el primer semestre académico con una intensidad de cuarenta horas
y cumpliendo con todos los requisitos académicos establecidos por la dirección del programa
Daniel Gomez - Microsoft MVP
Rector: Juan Carlos Pérez
Se expide el 12 de marzo de 2024 en la ciudad de Cali con registro oficial número 4455
"""

RICH_VISION_RESPONSE: Dict[str, Any] = {
    "fullTextAnnotation": {"text": CERTIFICATE_TEXT},
    "textAnnotations": [{"description": CERTIFICATE_TEXT}],
    "logoAnnotations": [
        {"description": "Universidad del Valle", "score": 0.87},
        {"description": "Blurry Mark", "score": 0.2},
    ],
    "localizedObjectAnnotations": [
        {"name": "Official Seal", "score": 0.65},
        {"name": "Person", "score": 0.9},
    ],
    "labelAnnotations": [
        {"description": "Handwriting", "score": 0.72},
        {"description": "Font", "score": 0.95},
    ],
    "imagePropertiesAnnotation": {"dominantColors": {"colors": []}},
}

GENERATIVE_ANSWER = json.dumps({
    "hasSignatures": True,
    "signatureCount": 2,
    "hasSeals": True,
    "sealCount": 1,
    "hasWatermarks": False,
    "formatConsistency": 85,
    "overallSecurity": 70,
    "suspiciousElements": [],
    "documentType": "certificate",
    "authenticityScore": 82,
})

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4 mock pdf content"


# =============================================================================
# Fake Clients
# =============================================================================

class FakeVisionClient:
    """In-memory stand-in for GoogleVisionClient."""

    def __init__(self, response: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.response = response if response is not None else {}
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    @property
    def is_available(self) -> bool:
        return True

    async def annotate(self, content, mime_type, features, language_hints):
        self.calls.append({
            "size": len(content),
            "mime_type": mime_type,
            "features": [f["type"] for f in features],
            "language_hints": language_hints,
        })
        if self.error is not None:
            raise self.error
        return self.response

    async def check_connection(self):
        return {"success": True, "message": "Vision API reachable"}

    async def aclose(self):
        self.closed = True


class FakeGenerativeClient:
    """In-memory stand-in for GeminiClient."""

    def __init__(
        self,
        answer: str = GENERATIVE_ANSWER,
        error: Optional[Exception] = None,
        available: bool = True,
        delay: float = 0.0,
    ):
        self.answer = answer
        self.error = error
        self.available = available
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    @property
    def is_available(self) -> bool:
        return self.available

    async def generate(self, prompt, content, mime_type):
        self.calls.append({"prompt": prompt, "size": len(content), "mime_type": mime_type})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.answer

    async def aclose(self):
        pass


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def anyio_backend():
    """Use asyncio for async tests."""
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def rich_vision_client() -> FakeVisionClient:
    return FakeVisionClient(response=RICH_VISION_RESPONSE)


@pytest.fixture
def generative_client() -> FakeGenerativeClient:
    return FakeGenerativeClient()


@pytest.fixture
def engine(rich_vision_client, settings) -> AuthenticityEngine:
    """Vision-only engine over the rich certificate response."""
    return AuthenticityEngine(rich_vision_client, None, settings)


@pytest.fixture
def hybrid_engine(rich_vision_client, generative_client, settings) -> AuthenticityEngine:
    return AuthenticityEngine(rich_vision_client, generative_client, settings)


@pytest.fixture
def services(rich_vision_client, settings) -> AuthenticityServices:
    engine = AuthenticityEngine(rich_vision_client, None, settings)
    return AuthenticityServices(engine, rich_vision_client, None)


@pytest.fixture
async def client(services) -> AsyncGenerator[AsyncClient, None]:
    """API client wired to fake services."""
    app.dependency_overrides[get_authenticity_services] = lambda: services
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_authenticity_services, None)
