from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cardscan.domain.pipeline.models import ExtractedRecord, SeedFields, ValidationTag

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorItem(BaseModel):
    code: str
    message: Optional[str] = None


class ProcessBase64Request(SeedFields):
    image: str = Field(..., min_length=1, description="Base64 image or data URL")

    def seeds(self) -> SeedFields:
        return SeedFields.model_validate(self.model_dump(exclude={"image"}))


class ProcessResponse(BaseModel):
    model_config = _CAMEL

    data: ExtractedRecord | None = None
    error: str | None = None
    raw_ocr_text: str | None = None
    uses_default_key: bool = False


class ValidateRequest(ExtractedRecord):
    surname: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    id_number: str = Field(..., min_length=1)

    def to_record(self) -> ExtractedRecord:
        return ExtractedRecord.model_validate(self.model_dump())


class ValidateResponse(BaseModel):
    model_config = _CAMEL

    validation_result: str | None = None
    type: ValidationTag
    error: str | None = None
