from __future__ import annotations

import json

import httpx
import pytest

from cardscan.application.llm.adapters.llm_openai_adapter import LlmOpenAIAdapter
from cardscan.application.llm.parsers import parse_completion, parse_validation
from cardscan.domain.pipeline.constants import COMPLETION_EMPTY_MESSAGE, VALIDATION_EMPTY_MESSAGE
from cardscan.domain.pipeline.errors import EmptyModelOutputError, LlmError
from cardscan.domain.pipeline.models import ExtractedRecord, SeedFields
from cardscan.infrastructure.clients.completions_http import CompletionsHttpClient

LLM_URL = "http://llm.local/v1/completions"


def _adapter(handler) -> LlmOpenAIAdapter:
    client = CompletionsHttpClient(
        base_url=LLM_URL,
        timeout_seconds=5,
        transport=httpx.MockTransport(handler),
    )
    return LlmOpenAIAdapter(client, model="gpt-4o", temperature=0.1, max_tokens=800)


def _choices(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.mark.asyncio
async def test_complete_fields_posts_gateway_payload() -> None:
    sent: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        sent.append(json.loads(request.content))
        content = json.dumps(
            {"surname": "Doe", "firstName": "John", "gender": "M", "dateOfBirth": "1990-01-01", "idNumber": "ID123"}
        )
        return httpx.Response(200, json=_choices(content))

    record = await _adapter(handler).complete_fields("Doe\nJohn", SeedFields(surname="Doe"))

    assert record == ExtractedRecord(
        surname="Doe", first_name="John", gender="M", date_of_birth="1990-01-01", id_number="ID123"
    )
    body = sent[0]
    assert set(body) == {"Model", "Content", "Temperature", "MaxTokens"}
    assert body["Model"] == "gpt-4o"
    assert body["Temperature"] == 0.1
    assert body["MaxTokens"] == 800
    assert "Doe\nJohn" in body["Content"]


@pytest.mark.asyncio
async def test_gateway_text_body_uses_last_json_line() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        payload = _choices('{"validationResult": "All fields look good."}')
        return httpx.Response(200, text="event: start\n\n" + json.dumps(payload) + "\n")

    result = await _adapter(handler).validate_fields(ExtractedRecord(surname="Doe"))
    assert result == "All fields look good."


@pytest.mark.asyncio
async def test_fenced_model_output_is_accepted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        content = (
            "```json\n"
            '{"surname": "Doe", "firstName": "Jane", "gender": "F", "dateOfBirth": "", "idNumber": "X1"}\n'
            "```"
        )
        return httpx.Response(200, json=_choices(content))

    record = await _adapter(handler).complete_fields("text", SeedFields())
    assert record.first_name == "Jane"
    assert record.date_of_birth == ""


@pytest.mark.asyncio
async def test_unusable_model_output_raises_empty_output_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        return httpx.Response(200, json=_choices("I could not read the card."))

    with pytest.raises(EmptyModelOutputError) as exc_info:
        await _adapter(handler).complete_fields("text", SeedFields())
    assert str(exc_info.value) == COMPLETION_EMPTY_MESSAGE


@pytest.mark.asyncio
async def test_gateway_error_status_raises_llm_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(LlmError, match="502 bad gateway") as exc_info:
        await _adapter(handler).validate_fields(ExtractedRecord())
    assert not isinstance(exc_info.value, EmptyModelOutputError)


@pytest.mark.asyncio
async def test_missing_base_url_raises() -> None:
    client = CompletionsHttpClient(base_url=None, timeout_seconds=5)
    with pytest.raises(LlmError, match="not configured"):
        await client.complete("hi", model="m", temperature=0.0, max_tokens=1)


def test_extract_message_content_falls_back_to_content_key() -> None:
    client = CompletionsHttpClient(base_url=LLM_URL, timeout_seconds=5)
    assert client.extract_message_content({"Content": "hello"}) == "hello"
    assert client.extract_message_content({"choices": []}) == ""


def test_parse_completion_requires_every_key() -> None:
    with pytest.raises(EmptyModelOutputError):
        parse_completion('{"surname": "Doe", "firstName": "John"}')


def test_parse_completion_rejects_non_string_values() -> None:
    with pytest.raises(EmptyModelOutputError):
        parse_completion(
            '{"surname": "Doe", "firstName": "John", "gender": "M", "dateOfBirth": 1990, "idNumber": "1"}'
        )


def test_parse_validation_requires_non_empty_result() -> None:
    assert parse_validation('{"validationResult": "Looks good"}') == "Looks good"
    with pytest.raises(EmptyModelOutputError) as exc_info:
        parse_validation('{"validationResult": "  "}')
    assert str(exc_info.value) == VALIDATION_EMPTY_MESSAGE
