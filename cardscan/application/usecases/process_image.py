"""Process image use-case.

Builds the run, injects the OCR-key advisory flag from settings, calls the
domain orchestrator and records metrics. Never raises for pipeline failures.
"""

from __future__ import annotations

import time

from cardscan.core.config import get_settings
from cardscan.core.logging import bind_run_id, get_logger, sanitize_id_number, sanitize_name
from cardscan.domain.pipeline.models import PipelineResult, SeedFields
from cardscan.domain.pipeline.orchestrator import PipelineRun, run_pipeline
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.domain.ports.ocr_port import OCRPort
from cardscan.observability.metrics import record_pipeline

logger = get_logger(__name__)


async def process_image(
    *,
    image: str,
    ocr_client: OCRPort,
    llm_client: LLMPort,
    seeds: SeedFields | None = None,
) -> PipelineResult:
    settings = get_settings()
    run = PipelineRun()

    with bind_run_id(run.run_id):
        logger.info("process_image_started", extra={"seeded": sorted((seeds or SeedFields()).non_empty())})
        started = time.perf_counter()
        result = await run_pipeline(
            image=image,
            ocr_client=ocr_client,
            llm_client=llm_client,
            seeds=seeds,
            uses_default_key=settings.uses_default_ocr_key,
            run=run,
            stage_timeout=settings.STAGE_TIMEOUT_SECONDS,
        )
        elapsed = time.perf_counter() - started
        record_pipeline(result.state.value, elapsed, result.timings)

        if result.data is not None:
            logger.info(
                "process_image_completed",
                extra={
                    "surname": sanitize_name(result.data.surname),
                    "id_number": sanitize_id_number(result.data.id_number),
                    "duration_ms": round(elapsed * 1000),
                },
            )
    return result
