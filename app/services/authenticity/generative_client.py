"""
DocuValle - Gemini Client
Sends a prompt plus an inline image to a Gemini vision-language model and
returns the model's free-text answer.
"""

import base64
from typing import Any, Dict, Optional, Protocol

import httpx

from .errors import GenerativeAnalysisError


class GenerativeClient(Protocol):
    """What the generative adapter needs from a vision-language backend."""

    @property
    def is_available(self) -> bool:
        ...

    async def generate(self, prompt: str, content: bytes, mime_type: str) -> str:
        """Return the model's text answer or raise GenerativeAnalysisError."""
        ...


class GeminiClient:
    """
    Gemini REST client (generateContent) authenticated with an API key.
    Owns one httpx.AsyncClient unless one is injected.
    """

    DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def is_available(self) -> bool:
        """Check if Gemini is configured."""
        return bool(self.api_key)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def generate(self, prompt: str, content: bytes, mime_type: str) -> str:
        if not self.is_available:
            raise GenerativeAnalysisError("Gemini API key is not configured")

        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": prompt},
                        {
                            "inlineData": {
                                "mimeType": mime_type,
                                "data": base64.b64encode(content).decode("ascii"),
                            }
                        },
                    ],
                }
            ],
            "generationConfig": {
                "temperature": 0.1,  # Low temp for consistent extraction
                "maxOutputTokens": 1024,
            },
        }

        url = f"{self.endpoint}/models/{self.model}:generateContent"
        try:
            response = await self._client.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise GenerativeAnalysisError(f"Gemini request failed: {e!r}") from e

        if response.status_code != 200:
            raise GenerativeAnalysisError(
                f"Gemini API error: {response.status_code} - {response.text[:500]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GenerativeAnalysisError("Gemini returned a non-JSON response") from e
        return self._candidate_text(data)

    @staticmethod
    def _candidate_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise GenerativeAnalysisError(f"Gemini returned no answer ({reason})")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text.strip():
            raise GenerativeAnalysisError("Gemini answer contained no text")
        return text
