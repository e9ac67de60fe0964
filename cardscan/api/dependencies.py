"""FastAPI dependencies providing the pipeline ports.

Tests override these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from cardscan.application.services.factories import build_frame_source, build_llm_client, build_ocr_client
from cardscan.domain.capture.session import FrameSource
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.domain.ports.ocr_port import OCRPort


def get_ocr_client() -> OCRPort:
    return build_ocr_client()


def get_llm_client() -> LLMPort:
    return build_llm_client()


def get_frame_source() -> FrameSource:
    return build_frame_source()
