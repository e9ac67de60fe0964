from __future__ import annotations

import json
from typing import Any

import httpx

from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.errors import LlmError

logger = get_logger(__name__)

ERROR_BODY_MAX_CHARS = 500


class CompletionsHttpClient:
    """Async client for the completions gateway.

    Request body: {"Model", "Content", "Temperature", "MaxTokens"}.
    The gateway answers either a JSON object or text whose last JSON line is
    the object.
    """

    def __init__(
        self,
        base_url: str | None,
        timeout_seconds: float,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._verify_ssl = verify_ssl
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout_seconds,
            verify=self._verify_ssl,
            transport=self._transport,
        )

    async def complete(self, content: str, *, model: str, temperature: float, max_tokens: int) -> dict[str, Any]:
        if not self._base_url:
            raise LlmError("LLM base_url is not configured")
        payload = {
            "Model": model,
            "Content": content,
            "Temperature": temperature,
            "MaxTokens": max_tokens,
        }
        try:
            async with self._client() as client:
                resp = await client.post(self._base_url, json=payload)
        except httpx.HTTPError as exc:
            raise LlmError(f"LLM request failed: {exc}") from exc

        if resp.is_error:
            body = resp.text[:ERROR_BODY_MAX_CHARS]
            raise LlmError(f"LLM API error: {resp.status_code} {body}")

        try:
            data = resp.json()
            if isinstance(data, dict):
                return data
        except ValueError:
            pass
        text = resp.text or ""
        for line in reversed(text.splitlines()):
            s = line.strip()
            if not s:
                continue
            try:
                obj = json.loads(s)
            except ValueError:
                continue
            if isinstance(obj, dict):
                return obj
        raise LlmError("LLM completion response not JSON")

    def extract_message_content(self, data: dict[str, Any]) -> str:
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            msg = choices[0].get("message") or {}
            content = msg.get("content") if isinstance(msg, dict) else None
            if isinstance(content, str) and content.strip():
                return content
        content = data.get("Content") or data.get("content")
        if isinstance(content, str) and content.strip():
            return content
        return ""
