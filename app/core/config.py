"""
DocuValle Configuration
Pydantic Settings for environment-based configuration.
Single source of truth for all app settings.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Use .env file for local development, env vars for production.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # App Identity
    # ==========================================================================
    app_name: str = "DocuValle"
    app_version: str = "2.0.0"
    app_description: str = """
## DocuValle - Document Authenticity Analysis

Upload a certificate, diploma or other official document (image or PDF) and
receive extracted text, detected seals / signatures / logos, an authenticity
score (0-100) and an accept / review / reject recommendation.
"""
    debug: bool = False
    enable_docs: bool = True

    # ==========================================================================
    # Server
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 8080

    # ==========================================================================
    # Uploads
    # ==========================================================================
    max_upload_size_mb: int = 50

    # ==========================================================================
    # Google Cloud Vision (OCR + annotations)
    # ==========================================================================
    google_vision_api_key: str = ""
    google_vision_endpoint: str = "https://vision.googleapis.com/v1"
    ocr_timeout_seconds: float = 30.0

    # ==========================================================================
    # Gemini (secondary generative analysis)
    # ==========================================================================
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "google_ai_api_key"),
    )
    gemini_model: str = "gemini-1.5-flash"
    gemini_endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    generative_enabled: bool = True
    generative_timeout_seconds: float = 30.0
    generative_max_bytes: int = 20 * 1024 * 1024  # Inline image limit

    @field_validator("google_vision_endpoint", "gemini_endpoint", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined with paths that already start with '/'."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    # ==========================================================================
    # Observability
    # ==========================================================================
    log_level: str = "INFO"
    log_json_format: bool = False

    # ==========================================================================
    # Deployment
    # ==========================================================================
    cors_origins: str = ""  # Comma-separated list of allowed origins

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS origins into a list with secure defaults.
        - If explicit origins set: use those
        - If empty: restrict to localhost only
        """
        if self.cors_origins:
            if self.cors_origins == "*":
                return ["*"]
            return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def vision_configured(self) -> bool:
        return bool(self.google_vision_api_key)

    @property
    def generative_configured(self) -> bool:
        return self.generative_enabled and bool(self.gemini_api_key)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use dependency injection: Depends(get_settings)
    """
    return Settings()
