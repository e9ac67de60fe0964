from __future__ import annotations

from cardscan.domain.pipeline.constants import COMPLETION_EMPTY_MESSAGE
from cardscan.domain.pipeline.errors import EmptyModelOutputError, InvalidInputError, LlmError
from cardscan.domain.pipeline.models import ExtractedRecord, RunContext, SeedFields
from cardscan.domain.ports.llm_port import LLMPort


def apply_seeds(record: ExtractedRecord, seeds: SeedFields) -> ExtractedRecord:
    """Put non-empty seed values back over the model output."""
    known = seeds.non_empty()
    if not known:
        return record
    return record.model_copy(update=known)


async def run_completion(context: RunContext, *, llm_client: LLMPort) -> RunContext:
    """Ask the model to fill the missing fields from the OCR text.

    Attaches the completed record to ``context.record``.
    """
    text = context.raw_ocr_text
    if not text or not text.strip():
        raise InvalidInputError("OCR text is required for field completion")
    try:
        record = await llm_client.complete_fields(text, context.seeds)
    except LlmError:
        raise
    except Exception as exc:
        raise LlmError(str(exc) or exc.__class__.__name__) from exc

    if not isinstance(record, ExtractedRecord):
        raise EmptyModelOutputError(COMPLETION_EMPTY_MESSAGE)

    context.record = apply_seeds(record, context.seeds)
    context.artifacts["model_record"] = record
    return context
