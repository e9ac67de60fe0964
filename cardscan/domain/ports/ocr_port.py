"""OCRPort protocol for OCR service access."""

from __future__ import annotations

from typing import Protocol

from cardscan.domain.pipeline.models import OcrResult


class OCRPort(Protocol):
    """Abstraction over the text-recognition service used by the pipeline."""

    async def recognize(self, base64_image: str) -> OcrResult: ...
