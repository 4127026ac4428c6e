"""Router exposing basic system endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter

from app.config import get_settings


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/status")
async def get_status() -> dict[str, str]:
    """Return a minimal status payload with the configured provider."""
    settings = get_settings()
    logger.debug("Status requested | provider=%s", settings.ai_provider)
    return {"status": "online", "provider": settings.ai_provider}
