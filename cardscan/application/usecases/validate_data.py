from __future__ import annotations

import time

from cardscan.core.config import get_settings
from cardscan.core.logging import bind_run_id, get_logger
from cardscan.domain.pipeline.models import ExtractedRecord, PipelineState, ValidationOutcome
from cardscan.domain.pipeline.orchestrator import PipelineRun, validate_record
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.observability.metrics import record_validation

logger = get_logger(__name__)


async def validate_data(record: ExtractedRecord, *, llm_client: LLMPort) -> ValidationOutcome:
    """Ask the model to assess a (possibly hand-edited) record."""
    run = PipelineRun(state=PipelineState.READY)
    with bind_run_id(run.run_id):
        started = time.perf_counter()
        outcome = await validate_record(
            record,
            llm_client=llm_client,
            run=run,
            stage_timeout=get_settings().STAGE_TIMEOUT_SECONDS,
        )
        record_validation(outcome.tag.value, time.perf_counter() - started)
        logger.info("validation_completed", extra={"tag": outcome.tag.value})
    return outcome
