from __future__ import annotations

from cardscan.application.llm.parsers import parse_completion, parse_validation
from cardscan.application.llm.prompts import build_completion_prompt, build_validation_prompt
from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.models import ExtractedRecord, SeedFields
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.infrastructure.clients.completions_http import CompletionsHttpClient

logger = get_logger(__name__)


class LlmOpenAIAdapter(LLMPort):
    def __init__(
        self,
        client: CompletionsHttpClient,
        *,
        model: str = "gpt-4o",
        temperature: float = 0.1,
        max_tokens: int = 800,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def _ask(self, prompt: str) -> str:
        data = await self._client.complete(
            prompt,
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        return self._client.extract_message_content(data)

    async def complete_fields(self, ocr_text: str, seeds: SeedFields) -> ExtractedRecord:
        content = await self._ask(build_completion_prompt(ocr_text, seeds))
        record = parse_completion(content)
        logger.info("completion_received", extra={"seeded": sorted(seeds.non_empty())})
        return record

    async def validate_fields(self, record: ExtractedRecord) -> str:
        content = await self._ask(build_validation_prompt(record))
        return parse_validation(content)
