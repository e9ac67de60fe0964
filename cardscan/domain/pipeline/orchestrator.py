"""Domain pipeline orchestrator.

Sequences OCR -> completion -> normalization for one submitted image, and the
validation stage for a (possibly hand-edited) record. Stage failures
short-circuit into a PipelineResult / ValidationOutcome; only cancellation
propagates to the caller.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Awaitable, TypeVar

from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.constants import (
    STAGE_COMPLETION,
    STAGE_NORMALIZE,
    STAGE_OCR,
    STAGE_VALIDATION,
)
from cardscan.domain.pipeline.errors import IllegalTransitionError, PipelineError, StageTimeoutError
from cardscan.domain.pipeline.models import (
    ExtractedRecord,
    PipelineResult,
    PipelineState,
    RunContext,
    SeedFields,
    ValidationOutcome,
    ValidationTag,
)
from cardscan.domain.pipeline.stages.complete import run_completion
from cardscan.domain.pipeline.stages.normalize import run_normalize
from cardscan.domain.pipeline.stages.ocr import run_ocr
from cardscan.domain.pipeline.stages.validate import run_validation
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.domain.ports.ocr_port import OCRPort

logger = get_logger(__name__)

T = TypeVar("T")

_UNEXPECTED_PROCESSING = "An unexpected error occurred during image processing."
_UNEXPECTED_VALIDATION = "An unexpected error occurred during data validation."

_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.OCR_RUNNING}),
    PipelineState.OCR_RUNNING: frozenset({PipelineState.OCR_FAILED, PipelineState.COMPLETION_RUNNING}),
    PipelineState.OCR_FAILED: frozenset(),
    PipelineState.COMPLETION_RUNNING: frozenset({PipelineState.COMPLETION_FAILED, PipelineState.READY}),
    PipelineState.COMPLETION_FAILED: frozenset(),
    PipelineState.READY: frozenset({PipelineState.VALIDATION_RUNNING}),
    PipelineState.VALIDATION_RUNNING: frozenset({PipelineState.VALIDATION_DONE, PipelineState.VALIDATION_FAILED}),
    # an edited record may be validated again
    PipelineState.VALIDATION_DONE: frozenset({PipelineState.VALIDATION_RUNNING}),
    PipelineState.VALIDATION_FAILED: frozenset({PipelineState.VALIDATION_RUNNING}),
}


class PipelineRun:
    """Tracks the state of one pipeline run and rejects out-of-order transitions."""

    def __init__(self, run_id: str | None = None, state: PipelineState = PipelineState.IDLE) -> None:
        self.run_id = run_id or uuid.uuid4().hex
        self._state = state
        self.history: list[PipelineState] = [state]

    @property
    def state(self) -> PipelineState:
        return self._state

    def advance(self, target: PipelineState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise IllegalTransitionError(f"Cannot move from {self._state.value} to {target.value}")
        logger.info(
            "pipeline_state_changed",
            extra={"run_id": self.run_id, "from_state": self._state.value, "to_state": target.value},
        )
        self._state = target
        self.history.append(target)


async def _bounded(stage: str, awaitable: Awaitable[T], timeout: float | None) -> T:
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        raise StageTimeoutError(f"{stage} timed out after {timeout:g}s") from exc


async def run_pipeline(
    *,
    image: str,
    ocr_client: OCRPort,
    llm_client: LLMPort,
    seeds: SeedFields | None = None,
    uses_default_key: bool = False,
    run: PipelineRun | None = None,
    stage_timeout: float | None = None,
) -> PipelineResult:
    """Run OCR, field completion and normalization for one image.

    Returns a PipelineResult with either ``data`` (normalized record) or
    ``error`` set. ``raw_ocr_text`` is None when OCR itself failed, "" when it
    found no text, and the recognized text otherwise.
    """
    run = run or PipelineRun()
    ctx = RunContext(run_id=run.run_id, image=image, seeds=seeds or SeedFields())
    timings: dict[str, float] = {}

    def _fail(state: PipelineState, message: str) -> PipelineResult:
        run.advance(state)
        logger.warning("pipeline_failed", extra={"run_id": run.run_id, "state": state.value, "error": message})
        return PipelineResult(
            data=None,
            error=message,
            raw_ocr_text=ctx.raw_ocr_text,
            uses_default_key=uses_default_key,
            state=run.state,
            timings=timings,
        )

    # OCR
    run.advance(PipelineState.OCR_RUNNING)
    started = time.perf_counter()
    error: str | None = None
    try:
        ctx = await _bounded(STAGE_OCR, run_ocr(ctx, ocr_client=ocr_client), stage_timeout)
    except PipelineError as exc:
        error = str(exc)
    except Exception as exc:
        logger.exception("ocr_stage_unexpected_error", extra={"run_id": run.run_id})
        error = str(exc) or _UNEXPECTED_PROCESSING
    timings[STAGE_OCR] = time.perf_counter() - started
    if error is not None:
        return _fail(PipelineState.OCR_FAILED, error)

    # Completion
    run.advance(PipelineState.COMPLETION_RUNNING)
    started = time.perf_counter()
    try:
        ctx = await _bounded(STAGE_COMPLETION, run_completion(ctx, llm_client=llm_client), stage_timeout)
    except PipelineError as exc:
        error = str(exc)
    except Exception as exc:
        logger.exception("completion_stage_unexpected_error", extra={"run_id": run.run_id})
        error = str(exc) or _UNEXPECTED_PROCESSING
    timings[STAGE_COMPLETION] = time.perf_counter() - started
    if error is not None:
        return _fail(PipelineState.COMPLETION_FAILED, error)

    # Normalize
    started = time.perf_counter()
    ctx = run_normalize(ctx)
    timings[STAGE_NORMALIZE] = time.perf_counter() - started

    run.advance(PipelineState.READY)
    return PipelineResult(
        data=ctx.record,
        error=None,
        raw_ocr_text=ctx.raw_ocr_text,
        uses_default_key=uses_default_key,
        state=run.state,
        timings=timings,
    )


async def validate_record(
    record: ExtractedRecord,
    *,
    llm_client: LLMPort,
    run: PipelineRun | None = None,
    stage_timeout: float | None = None,
) -> ValidationOutcome:
    """Run the validation stage for a completed record.

    ``run`` defaults to a fresh run in the ``ready`` state (the record may come
    from a previous request after human edits).
    """
    run = run or PipelineRun(state=PipelineState.READY)
    run.advance(PipelineState.VALIDATION_RUNNING)
    try:
        outcome = await _bounded(STAGE_VALIDATION, run_validation(record, llm_client=llm_client), stage_timeout)
    except PipelineError as exc:
        outcome = ValidationOutcome(message=str(exc), tag=ValidationTag.ERROR)
    except Exception as exc:
        logger.exception("validation_stage_unexpected_error", extra={"run_id": run.run_id})
        outcome = ValidationOutcome(message=str(exc) or _UNEXPECTED_VALIDATION, tag=ValidationTag.ERROR)

    if outcome.tag is ValidationTag.ERROR:
        run.advance(PipelineState.VALIDATION_FAILED)
    else:
        run.advance(PipelineState.VALIDATION_DONE)
    return outcome
