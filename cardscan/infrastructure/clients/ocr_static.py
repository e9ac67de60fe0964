"""In-memory OCR adapter returning a fixed text; used for local runs without an OCR key."""

from __future__ import annotations

from cardscan.domain.pipeline.errors import InvalidInputError
from cardscan.domain.pipeline.models import OcrParsedResult, OcrResult
from cardscan.domain.ports.ocr_port import OCRPort


class StaticTextOcrClient(OCRPort):
    def __init__(self, text: str) -> None:
        self._text = text

    async def recognize(self, base64_image: str) -> OcrResult:
        if not base64_image or not base64_image.strip():
            raise InvalidInputError("base64 image must not be empty")
        return OcrResult(
            parsed_results=[OcrParsedResult(parsed_text=self._text)],
            ocr_exit_code=1,
            is_errored_on_processing=False,
        )
