"""Domain-level errors for the pipeline.

Mapping to HTTP is handled in the API layer; the orchestrator turns these into
a PipelineResult so they never cross the pipeline boundary.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base error for domain pipeline failures."""


class InvalidInputError(PipelineError):
    """Raised when the submitted image or record is missing or malformed."""


class OcrError(PipelineError):
    """Raised when the OCR call fails or the service reports a processing error."""

    def __init__(self, message: str, *, messages: list[str] | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.messages = list(messages or [])
        self.status_code = status_code


class LlmError(PipelineError):
    """Raised when a model request fails at the transport or gateway level."""


class EmptyModelOutputError(LlmError):
    """The model call succeeded but produced no usable structured payload."""


class StageTimeoutError(PipelineError):
    """Raised when a stage exceeds its deadline."""


class IllegalTransitionError(PipelineError):
    """Raised when a run is driven through a transition its state does not allow."""
