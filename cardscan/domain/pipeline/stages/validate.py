from __future__ import annotations

from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.constants import VALIDATION_EMPTY_MESSAGE, VALIDATION_SUCCESS_KEYWORDS
from cardscan.domain.pipeline.errors import EmptyModelOutputError
from cardscan.domain.pipeline.models import ExtractedRecord, ValidationOutcome, ValidationTag
from cardscan.domain.ports.llm_port import LLMPort

logger = get_logger(__name__)


def classify_validation(text: str) -> ValidationTag:
    lowered = text.lower()
    if any(keyword in lowered for keyword in VALIDATION_SUCCESS_KEYWORDS):
        return ValidationTag.SUCCESS
    return ValidationTag.INFO


async def run_validation(record: ExtractedRecord, *, llm_client: LLMPort) -> ValidationOutcome:
    """Ask the model for a consistency assessment of ``record``.

    Transport and gateway failures become an ``error`` outcome carrying the
    failure message. An empty answer raises EmptyModelOutputError.
    """
    try:
        text = await llm_client.validate_fields(record)
    except EmptyModelOutputError:
        raise
    except Exception as exc:
        logger.warning("validation_call_failed", extra={"error": str(exc)})
        return ValidationOutcome(message=str(exc) or exc.__class__.__name__, tag=ValidationTag.ERROR)

    if not isinstance(text, str) or not text.strip():
        raise EmptyModelOutputError(VALIDATION_EMPTY_MESSAGE)
    return ValidationOutcome(message=text, tag=classify_validation(text))
