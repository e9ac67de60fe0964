from __future__ import annotations

import json
import re
from typing import Any

from cardscan.domain.pipeline.constants import COMPLETION_EMPTY_MESSAGE, VALIDATION_EMPTY_MESSAGE
from cardscan.domain.pipeline.errors import EmptyModelOutputError
from cardscan.domain.pipeline.models import ExtractedRecord

COMPLETION_KEYS = ("surname", "firstName", "gender", "dateOfBirth", "idNumber")

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def _load_object(content: str) -> dict[str, Any] | None:
    text = (content or "").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    if not text:
        return None
    try:
        obj = json.loads(text)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def parse_completion(content: str) -> ExtractedRecord:
    obj = _load_object(content)
    if obj is None or any(not isinstance(obj.get(key), str) for key in COMPLETION_KEYS):
        raise EmptyModelOutputError(COMPLETION_EMPTY_MESSAGE)
    return ExtractedRecord.model_validate({key: obj[key] for key in COMPLETION_KEYS})


def parse_validation(content: str) -> str:
    obj = _load_object(content)
    result = obj.get("validationResult") if obj is not None else None
    if not isinstance(result, str) or not result.strip():
        raise EmptyModelOutputError(VALIDATION_EMPTY_MESSAGE)
    return result
