"""Deterministic post-processing of model output. Never raises."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from dateutil import parser as dateparser

from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.constants import ISO_DATE_RE, VALID_GENDERS
from cardscan.domain.pipeline.models import ExtractedRecord, RunContext

logger = get_logger(__name__)

_HAS_DIGIT_RE = re.compile(r"\d")

# Missing month/day become 01; a year still equal to 1 means the input had none.
_PARSE_DEFAULT = datetime(1, 1, 1)


def normalize_date_of_birth(value: str) -> str:
    """Return ``value`` as YYYY-MM-DD when it can be parsed, else unchanged."""
    if ISO_DATE_RE.match(value or ""):
        return value
    if not value or not _HAS_DIGIT_RE.search(value):
        logger.warning("date_of_birth_unparsed", extra={"reason": "no_date_content"})
        return value
    try:
        parsed = dateparser.parse(value, default=_PARSE_DEFAULT)
        if parsed.year == _PARSE_DEFAULT.year:
            logger.warning("date_of_birth_unparsed", extra={"reason": "no_year"})
            return value
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date().isoformat()
    except (ValueError, OverflowError) as exc:
        logger.warning("date_of_birth_unparsed", extra={"reason": str(exc)})
        return value


def normalize_gender(value: str) -> str:
    upper = (value or "").upper()
    if upper in VALID_GENDERS:
        return upper
    return value


def normalize_record(record: ExtractedRecord) -> ExtractedRecord:
    return record.model_copy(
        update={
            "date_of_birth": normalize_date_of_birth(record.date_of_birth),
            "gender": normalize_gender(record.gender),
        }
    )


def run_normalize(context: RunContext) -> RunContext:
    if context.record is not None:
        context.record = normalize_record(context.record)
    return context
