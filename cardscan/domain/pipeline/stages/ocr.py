from __future__ import annotations

from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.constants import NO_TEXT_MESSAGE, UNKNOWN_OCR_ERROR
from cardscan.domain.pipeline.errors import InvalidInputError, OcrError
from cardscan.domain.pipeline.models import OcrResult, RunContext
from cardscan.domain.ports.ocr_port import OCRPort

logger = get_logger(__name__)


async def run_ocr(context: RunContext, *, ocr_client: OCRPort) -> RunContext:
    """Run OCR via OCRPort and attach the OcrResult and first parsed text to the context.

    Raises OcrError on transport failures, service-reported failures and blank text.
    On blank text ``context.raw_ocr_text`` is set to the (blank) text before raising.
    """
    if not context.image or not context.image.strip():
        raise InvalidInputError("An image is required for OCR")
    try:
        ocr_result: OcrResult = await ocr_client.recognize(context.image)
    except (OcrError, InvalidInputError):
        raise
    except Exception as exc:
        raise OcrError(str(exc) or exc.__class__.__name__) from exc

    context.artifacts["ocr_result"] = ocr_result

    if not ocr_result.is_usable:
        details = ", ".join(ocr_result.error_message) or UNKNOWN_OCR_ERROR
        raise OcrError(f"OCR processing failed: {details}", messages=ocr_result.error_message)

    text = ocr_result.first_text or ""
    context.raw_ocr_text = text
    if not text.strip():
        raise OcrError(NO_TEXT_MESSAGE)

    logger.info("ocr_text_received", extra={"run_id": context.run_id, "chars": len(text)})
    return context
