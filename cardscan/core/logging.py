from __future__ import annotations

import contextvars
import logging
import re
import sys
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | request_id=%(request_id)s run_id=%(run_id)s | %(message)s"

_request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")
_run_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")

# Caller-supplied ids end up in every log line; anything else is replaced.
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

_QUIET_LOGGERS = ("httpx", "httpcore", "PIL", "multipart")


def get_request_id() -> str:
    return _request_id_ctx.get()


def get_run_id() -> str:
    return _run_id_ctx.get()


@contextmanager
def bind_run_id(run_id: str) -> Iterator[None]:
    """Tag every log record emitted inside the block with ``run_id``."""
    token = _run_id_ctx.set(run_id)
    try:
        yield
    finally:
        _run_id_ctx.reset(token)


class ContextFilter(logging.Filter):
    """Copy request_id and run_id from contextvars onto log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = get_request_id()
        record.run_id = get_run_id()
        return True


def configure_logging(level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger.

    Safe to call repeatedly (uvicorn reload, tests).
    """
    level = level.upper()
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_name(value: str | None) -> str:
    """Mask a personal name for logs: first 2 + last 2 chars kept."""
    if not value:
        return "***"
    value = value.strip()
    if len(value) < 4:
        return "***"
    return f"{value[:2]}***{value[-2:]}"


def sanitize_id_number(value: str | None) -> str:
    """Mask an ID number for logs: first 3 + last 2 chars kept."""
    if not value or len(value) < 5:
        return "***"
    return f"{value[:3]}***{value[-2:]}"


def _resolve_request_id(incoming: Optional[str]) -> str:
    if incoming and _REQUEST_ID_RE.match(incoming):
        return incoming
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Give each request an id, expose it to logging and echo it back.

    A well-formed ``X-Request-ID`` from the caller is reused; otherwise a new
    one is generated. The id is also kept on ``request.state.request_id``.
    """

    async def dispatch(self, request: Request, call_next):
        rid = _resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid
        token = _request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            _request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
