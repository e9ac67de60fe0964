"""HTTP client adapter for the OCR.space text-recognition API."""

from __future__ import annotations

import httpx

from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.constants import OCR_SUCCESS_EXIT_CODE
from cardscan.domain.pipeline.errors import InvalidInputError, OcrError
from cardscan.domain.pipeline.models import OcrResult
from cardscan.domain.ports.ocr_port import OCRPort
from cardscan.utils.images import to_data_url

logger = get_logger(__name__)

ERROR_BODY_MAX_CHARS = 500


class OcrSpaceHttpClient(OCRPort):
    """OCR.space client implementing OCRPort using httpx (async).

    One POST per call, multipart form:
      base64Image, apikey, language, isOverlayRequired=false,
      detectOrientation=true, scale=true
    Response: {"ParsedResults": [{"ParsedText": ...}], "OCRExitCode": 1,
               "IsErroredOnProcessing": false, "ErrorMessage": [...]}
    Not retried; the caller re-submits.
    """

    def __init__(
        self,
        base_url: str | None,
        api_key: str,
        *,
        language: str = "eng",
        timeout_seconds: float = 60.0,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._language = language
        self._timeout_seconds = timeout_seconds
        self._verify_ssl = verify_ssl
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout_seconds,
            verify=self._verify_ssl,
            transport=self._transport,
        )

    def _form(self, base64_image: str) -> dict[str, tuple[None, str]]:
        fields = {
            "base64Image": to_data_url(base64_image),
            "apikey": self._api_key,
            "language": self._language,
            "isOverlayRequired": "false",
            "detectOrientation": "true",
            "scale": "true",
        }
        # (None, value) parts force a multipart body without file names
        return {name: (None, value) for name, value in fields.items()}

    async def recognize(self, base64_image: str) -> OcrResult:
        if not base64_image or not base64_image.strip():
            raise InvalidInputError("base64 image must not be empty")
        if not self._base_url:
            raise OcrError("OCR base_url is not configured")

        logger.info("ocr_request_sent", extra={"image_chars": len(base64_image)})
        try:
            async with self._client() as client:
                resp = await client.post(self._base_url, files=self._form(base64_image))
        except httpx.HTTPError as exc:
            raise OcrError(str(exc) or exc.__class__.__name__) from exc

        if resp.is_error:
            body = resp.text[:ERROR_BODY_MAX_CHARS]
            raise OcrError(f"OCR.space API error: {resp.status_code} {body}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise OcrError("OCR.space response is not JSON") from exc
        if not isinstance(data, dict):
            raise OcrError("OCR.space response is not a JSON object")

        result = OcrResult.from_response(data)
        if result.is_errored_on_processing or result.ocr_exit_code != OCR_SUCCESS_EXIT_CODE:
            messages = result.error_message
            raise OcrError(
                f"OCR.space processing error: {', '.join(messages) or 'Unknown error'}",
                messages=messages,
            )
        logger.info(
            "ocr_response_received",
            extra={"exit_code": result.ocr_exit_code, "blocks": len(result.parsed_results)},
        )
        return result
