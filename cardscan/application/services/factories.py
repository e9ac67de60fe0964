from __future__ import annotations

from cardscan.application.llm.adapters.llm_fake_adapter import FakeLLMAdapter
from cardscan.application.llm.adapters.llm_openai_adapter import LlmOpenAIAdapter
from cardscan.core.config import get_settings
from cardscan.core.logging import get_logger
from cardscan.domain.capture.session import FrameSource
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.domain.ports.ocr_port import OCRPort
from cardscan.infrastructure.clients.completions_http import CompletionsHttpClient
from cardscan.infrastructure.clients.ocr_space_http import OcrSpaceHttpClient
from cardscan.infrastructure.clients.ocr_static import StaticTextOcrClient

logger = get_logger(__name__)


def build_ocr_client() -> OCRPort:
    s = get_settings()
    if s.OCR_FAKE_TEXT is not None and s.uses_default_ocr_key:
        logger.info("ocr_client_static", extra={"reason": "OCR_FAKE_TEXT set"})
        return StaticTextOcrClient(s.OCR_FAKE_TEXT)
    return OcrSpaceHttpClient(
        base_url=s.OCR_BASE_URL,
        api_key=s.effective_ocr_api_key,
        language=s.OCR_LANGUAGE,
        timeout_seconds=s.OCR_TIMEOUT_SECONDS,
        verify_ssl=s.OCR_VERIFY_SSL,
    )


def build_llm_client() -> LLMPort:
    s = get_settings()
    if not s.LLM_BASE_URL:
        # Dev-mode fake keeps runtime self-contained (no model calls)
        return FakeLLMAdapter()
    client = CompletionsHttpClient(
        base_url=s.LLM_BASE_URL,
        timeout_seconds=s.LLM_TIMEOUT_SECONDS,
        verify_ssl=s.LLM_VERIFY_SSL,
    )
    return LlmOpenAIAdapter(
        client,
        model=s.LLM_MODEL,
        temperature=s.LLM_TEMPERATURE,
        max_tokens=s.LLM_MAX_TOKENS,
    )


def build_frame_source() -> FrameSource:
    # cv2 is imported on demand: only the camera endpoint needs it
    from cardscan.infrastructure.capture.opencv_source import OpenCvFrameSource

    return OpenCvFrameSource(device=get_settings().CAMERA_DEVICE)
