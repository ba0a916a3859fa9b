"""
Document Authenticity API Router
================================
Upload a document image or PDF and get back the authenticity verdict.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from app.core.config import Settings, get_settings
from app.services.authenticity import SUPPORTED_MIME_TYPES, AuthenticityServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/authenticity", tags=["Authenticity"])


def get_authenticity_services(request: Request) -> AuthenticityServices:
    """Services created by the application lifespan."""
    services = getattr(request.app.state, "authenticity_services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Authenticity services are not initialized")
    return services


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/analyze")
async def analyze_document(
    file: UploadFile = File(...),
    services: AuthenticityServices = Depends(get_authenticity_services),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Analyze one document.

    Returns the extracted text, detected seals / signatures / logos, quality
    flags, the optional generative signal, the score breakdown, the 0-100
    score and the accept / review / reject recommendation.
    """
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (max {settings.max_upload_size_mb}MB)",
        )

    logger.info(
        "Analyze request: %s (%d bytes, %s)",
        file.filename, len(content), file.content_type,
    )
    analysis = await services.engine.analyze(content, file.content_type or "")

    return {
        "success": True,
        "filename": file.filename,
        "size": len(content),
        "mime_type": file.content_type,
        "analysis": analysis.to_dict(),
    }


@router.get("/health")
async def authenticity_health(
    services: AuthenticityServices = Depends(get_authenticity_services),
) -> Dict[str, Any]:
    """Which analysis backends are configured."""
    backends = {
        "vision": services.vision_client.is_available,
        "generative": services.generative_client is not None and services.generative_client.is_available,
    }
    return {
        "status": "healthy" if backends["vision"] else "degraded",
        "backends": backends,
        "supported_types": list(SUPPORTED_MIME_TYPES),
    }


@router.get("/health/vision")
async def vision_health(
    services: AuthenticityServices = Depends(get_authenticity_services),
) -> Dict[str, Any]:
    """Round-trip a 1x1 image through the Vision API."""
    return await services.vision_client.check_connection()
