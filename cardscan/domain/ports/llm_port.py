"""LLMPort protocol for model-based field completion and validation.

Two implementations exist: the completions-gateway adapter and a
deterministic fake used in dev mode and tests.
"""

from __future__ import annotations

from typing import Protocol

from cardscan.domain.pipeline.models import ExtractedRecord, SeedFields


class LLMPort(Protocol):
    """Abstraction over the generative model used by the pipeline."""

    async def complete_fields(self, ocr_text: str, seeds: SeedFields) -> ExtractedRecord: ...

    async def validate_fields(self, record: ExtractedRecord) -> str: ...
