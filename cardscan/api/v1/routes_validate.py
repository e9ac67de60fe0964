from __future__ import annotations

from fastapi import APIRouter, Depends

from cardscan.api.dependencies import get_llm_client
from cardscan.application.usecases.validate_data import validate_data
from cardscan.domain.pipeline.models import ValidationTag
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.models.schemas import ValidateRequest, ValidateResponse

router = APIRouter(prefix="/v1", tags=["validate"])


@router.post("/validate", response_model=ValidateResponse)
async def validate(body: ValidateRequest, llm_client: LLMPort = Depends(get_llm_client)) -> ValidateResponse:
    outcome = await validate_data(body.to_record(), llm_client=llm_client)
    if outcome.tag is ValidationTag.ERROR:
        return ValidateResponse(validation_result=None, type=outcome.tag, error=outcome.message)
    return ValidateResponse(validation_result=outcome.message, type=outcome.tag, error=None)
