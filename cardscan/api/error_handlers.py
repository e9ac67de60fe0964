from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from cardscan.core.logging import REQUEST_ID_HEADER, get_logger
from cardscan.models.schemas import ErrorItem
from cardscan.observability.errors import ERROR_REGISTRY

logger = get_logger(__name__)


async def handle_unknown_error(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback, answer 500 without internals."""
    request_id = getattr(request.state, "request_id", None)
    logger.error(
        "unhandled_exception",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
        exc_info=exc,
    )
    meta = ERROR_REGISTRY["INTERNAL_PROCESSING_ERROR"]
    item = ErrorItem(code="INTERNAL_PROCESSING_ERROR", message=meta["message"])
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(status_code=meta["status"], content={"detail": item.model_dump()}, headers=headers)
