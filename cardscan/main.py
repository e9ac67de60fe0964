"""ASGI entry point: ``uvicorn cardscan.main:app``."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from cardscan.api.error_handlers import handle_unknown_error
from cardscan.api.v1 import routes_export, routes_health, routes_process, routes_validate
from cardscan.core.config import get_settings
from cardscan.core.logging import RequestIdMiddleware, configure_logging, get_logger
from cardscan.observability import metrics

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "service_startup",
        extra={
            "env": settings.ENV,
            "llm_mode": "gateway" if settings.LLM_BASE_URL else "fake",
            "ocr_url": settings.OCR_BASE_URL,
            "stage_timeout_s": settings.STAGE_TIMEOUT_SECONDS,
        },
    )
    if settings.uses_default_ocr_key:
        logger.warning("ocr_default_key_in_use: requests are rate-limited, set OCR_SPACE_API_KEY")
    yield
    logger.info("service_shutdown")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# last added runs outermost
app.add_middleware(metrics.MetricsMiddleware)
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(Exception, handle_unknown_error)

for module in (routes_health, routes_process, routes_validate, routes_export, metrics):
    app.include_router(module.router)
