import pytest

from cardscan.application.llm.adapters.llm_fake_adapter import FakeLLMAdapter
from cardscan.domain.pipeline.models import ExtractedRecord, SeedFields


@pytest.mark.asyncio
async def test_fills_fields_from_ocr_lines() -> None:
    record = await FakeLLMAdapter().complete_fields("Doe\n\nJohn\nM", SeedFields())
    assert record.surname == "Doe"
    assert record.first_name == "John"
    assert record.gender == "M"
    assert record.date_of_birth == ""
    assert record.id_number == ""


@pytest.mark.asyncio
async def test_seeded_fields_win() -> None:
    record = await FakeLLMAdapter().complete_fields("Doe\nJohn", SeedFields(first_name="Johnny"))
    assert record.first_name == "Johnny"
    assert record.surname == "Doe"


@pytest.mark.asyncio
async def test_validation_reports_issues() -> None:
    llm = FakeLLMAdapter()
    good = ExtractedRecord(surname="Doe", first_name="John", gender="M", date_of_birth="1990-01-01", id_number="1")
    assert await llm.validate_fields(good) == "All fields look consistent."

    bad = good.model_copy(update={"gender": "X", "date_of_birth": "01/01/1990", "id_number": ""})
    message = await llm.validate_fields(bad)
    assert message.startswith("Possible issues found:")
    assert "ID number is missing" in message
    assert "gender 'X'" in message
    assert "01/01/1990" in message
