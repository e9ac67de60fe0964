"""Deterministic stand-in for the generative model.

Used when no completions gateway is configured (local runs) and in tests.
"""

from __future__ import annotations

from cardscan.domain.pipeline.constants import ISO_DATE_RE, VALID_GENDERS
from cardscan.domain.pipeline.models import ExtractedRecord, SeedFields
from cardscan.domain.ports.llm_port import LLMPort

_FIELD_ORDER = ("surname", "first_name", "gender", "date_of_birth", "id_number")
_LABELS = {
    "surname": "surname",
    "first_name": "first name",
    "gender": "gender",
    "date_of_birth": "date of birth",
    "id_number": "ID number",
}


class FakeLLMAdapter(LLMPort):
    """Fills the i-th missing field from the i-th non-blank OCR line."""

    async def complete_fields(self, ocr_text: str, seeds: SeedFields) -> ExtractedRecord:
        lines = [line.strip() for line in ocr_text.splitlines() if line.strip()]
        known = seeds.non_empty()
        values: dict[str, str] = {}
        for idx, name in enumerate(_FIELD_ORDER):
            if name in known:
                values[name] = known[name]
            else:
                values[name] = lines[idx] if idx < len(lines) else ""
        return ExtractedRecord(**values)

    async def validate_fields(self, record: ExtractedRecord) -> str:
        issues: list[str] = []
        for name in _FIELD_ORDER:
            if not getattr(record, name).strip():
                issues.append(f"{_LABELS[name]} is missing")
        if record.gender and record.gender not in VALID_GENDERS:
            issues.append(f"gender '{record.gender}' is not M or F")
        if record.date_of_birth and not ISO_DATE_RE.match(record.date_of_birth):
            issues.append(f"date of birth '{record.date_of_birth}' is not in YYYY-MM-DD format")
        if not issues:
            return "All fields look consistent."
        return "Possible issues found: " + "; ".join(issues) + "."
