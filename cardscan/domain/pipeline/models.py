"""Domain models for the ID-card extraction pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire; accepts both on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExtractedRecord(_CamelModel):
    """Canonical structured output of the pipeline."""

    surname: str = ""
    first_name: str = ""
    gender: str = ""
    date_of_birth: str = ""
    id_number: str = ""

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class SeedFields(_CamelModel):
    """Field values known before completion; empty means "fill this one"."""

    surname: str | None = None
    first_name: str | None = None
    gender: str | None = None
    date_of_birth: str | None = None
    id_number: str | None = None

    def non_empty(self) -> dict[str, str]:
        return {k: v for k, v in self.model_dump().items() if isinstance(v, str) and v.strip()}


class OcrParsedResult(BaseModel):
    parsed_text: str = ""
    error_message: str | None = None
    error_details: str | None = None


class OcrResult(BaseModel):
    """Structured OCR.space response used by downstream stages."""

    parsed_results: list[OcrParsedResult] = []
    ocr_exit_code: int = 0
    is_errored_on_processing: bool = False
    error_message: list[str] = []
    processing_time_ms: str | None = None
    raw: dict[str, Any] | None = None

    @property
    def first_text(self) -> str | None:
        if not self.parsed_results:
            return None
        return self.parsed_results[0].parsed_text

    @property
    def is_usable(self) -> bool:
        return not self.is_errored_on_processing and bool(self.parsed_results)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "OcrResult":
        """Build from the OCR.space JSON body (PascalCase keys)."""
        parsed: list[OcrParsedResult] = []
        for item in data.get("ParsedResults") or []:
            if not isinstance(item, dict):
                continue
            parsed.append(
                OcrParsedResult(
                    parsed_text=str(item.get("ParsedText") or ""),
                    error_message=_as_optional_str(item.get("ErrorMessage")),
                    error_details=_as_optional_str(item.get("ErrorDetails")),
                )
            )
        try:
            exit_code = int(data.get("OCRExitCode", 0))
        except (TypeError, ValueError):
            exit_code = 0
        return cls(
            parsed_results=parsed,
            ocr_exit_code=exit_code,
            is_errored_on_processing=bool(data.get("IsErroredOnProcessing", False)),
            error_message=_as_message_list(data.get("ErrorMessage")),
            processing_time_ms=_as_optional_str(data.get("ProcessingTimeInMilliseconds")),
            raw=data,
        )


def _as_optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _as_message_list(value: Any) -> list[str]:
    # OCR.space sends ErrorMessage as a list, but older responses use a plain string.
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return [str(value)] if value else []


class ValidationTag(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class ValidationOutcome(BaseModel):
    message: str
    tag: ValidationTag


class PipelineState(str, Enum):
    IDLE = "idle"
    OCR_RUNNING = "ocr_running"
    OCR_FAILED = "ocr_failed"
    COMPLETION_RUNNING = "completion_running"
    COMPLETION_FAILED = "completion_failed"
    READY = "ready"
    VALIDATION_RUNNING = "validation_running"
    VALIDATION_DONE = "validation_done"
    VALIDATION_FAILED = "validation_failed"


class RunContext(BaseModel):
    """Context flowing between stages during a pipeline run."""

    run_id: str
    image: str = ""
    seeds: SeedFields = Field(default_factory=SeedFields)
    raw_ocr_text: str | None = None
    record: ExtractedRecord | None = None
    artifacts: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)


class PipelineResult(BaseModel):
    """Discriminated result of one pipeline run: either data or error is set."""

    data: ExtractedRecord | None = None
    error: str | None = None
    raw_ocr_text: str | None = None
    uses_default_key: bool = False
    state: PipelineState = PipelineState.IDLE
    timings: dict[str, float] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None
