from __future__ import annotations

from typing import Iterator

import pytest

from cardscan.core.config import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test against default settings, independent of the caller's environment."""
    for name in (
        "OCR_SPACE_API_KEY",
        "CARDSCAN_OCR_SPACE_API_KEY",
        "CARDSCAN_LLM_BASE_URL",
        "CARDSCAN_OCR_FAKE_TEXT",
        "CARDSCAN_STAGE_TIMEOUT_SECONDS",
        "CARDSCAN_PDF_FONT_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
