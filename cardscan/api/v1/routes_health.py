from fastapi import APIRouter, Request

from cardscan.core.config import get_settings
from cardscan.core.logging import get_logger

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Liveness check: process is up."""
    settings = get_settings()
    get_logger(__name__).debug("health", extra={"path": str(request.url.path)})
    return {"status": "ok", "service": settings.APP_NAME}


@router.get("/ready")
async def ready(request: Request):
    """Readiness check; also reports whether the rate-limited OCR key is in use."""
    settings = get_settings()
    get_logger(__name__).debug("ready", extra={"path": str(request.url.path)})
    return {"status": "ok", "service": settings.APP_NAME, "usesDefaultKey": settings.uses_default_ocr_key}
