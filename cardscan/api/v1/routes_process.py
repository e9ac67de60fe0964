from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, UploadFile

from cardscan.api.dependencies import get_frame_source, get_llm_client, get_ocr_client
from cardscan.application.usecases.process_image import process_image
from cardscan.core.config import get_settings
from cardscan.core.logging import get_logger
from cardscan.domain.capture.session import CaptureError, FrameSource, capture_still
from cardscan.domain.pipeline.models import PipelineResult, SeedFields
from cardscan.domain.ports.llm_port import LLMPort
from cardscan.domain.ports.ocr_port import OCRPort
from cardscan.models.schemas import ProcessBase64Request, ProcessResponse
from cardscan.observability.errors import to_http_error
from cardscan.utils.images import bytes_to_data_url, detect_image_type

router = APIRouter(prefix="/v1", tags=["process"])
logger = get_logger(__name__)

ALLOWED_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tif", ".tiff", ".webp"}
_CHUNK_SIZE = 1024 * 1024


def _to_response(result: PipelineResult) -> ProcessResponse:
    return ProcessResponse(
        data=result.data,
        error=result.error,
        raw_ocr_text=result.raw_ocr_text,
        uses_default_key=result.uses_default_key,
    )


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    try:
        while True:
            chunk = await file.read(_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > max_bytes:
                raise to_http_error(
                    "PAYLOAD_TOO_LARGE",
                    message=f"Uploaded file is too large (max: {max_bytes // (1024 * 1024)}MB)",
                )
            chunks.append(chunk)
    except OSError as e:
        raise to_http_error("UPLOAD_READ_FAILED", message=f"Failed to read uploaded file: {e}")
    finally:
        await file.close()
    return b"".join(chunks)


@router.post("/process", response_model=ProcessResponse)
async def process_upload(
    file: UploadFile = File(...),
    surname: str | None = Form(None),
    first_name: str | None = Form(None, alias="firstName"),
    gender: str | None = Form(None),
    date_of_birth: str | None = Form(None, alias="dateOfBirth"),
    id_number: str | None = Form(None, alias="idNumber"),
    ocr_client: OCRPort = Depends(get_ocr_client),
    llm_client: LLMPort = Depends(get_llm_client),
) -> ProcessResponse:
    logger.info(
        "process_request_received",
        extra={"uploaded_filename": file.filename, "uploaded_content_type": file.content_type},
    )
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in ALLOWED_SUFFIXES:
        raise to_http_error("UNSUPPORTED_FILE_TYPE")

    content = await _read_upload(file, get_settings().MAX_UPLOAD_MB * 1024 * 1024)
    if not content:
        raise to_http_error("EMPTY_FILE")
    detected = detect_image_type(content[:12])
    if detected is None:
        raise to_http_error("UNSUPPORTED_FILE_TYPE", message="Uploaded file is not a recognized image")

    seeds = SeedFields(
        surname=surname,
        first_name=first_name,
        gender=gender,
        date_of_birth=date_of_birth,
        id_number=id_number,
    )
    result = await process_image(
        image=bytes_to_data_url(content, detected[1]),
        ocr_client=ocr_client,
        llm_client=llm_client,
        seeds=seeds,
    )
    return _to_response(result)


@router.post("/process/base64", response_model=ProcessResponse)
async def process_base64(
    body: ProcessBase64Request,
    ocr_client: OCRPort = Depends(get_ocr_client),
    llm_client: LLMPort = Depends(get_llm_client),
) -> ProcessResponse:
    result = await process_image(
        image=body.image,
        ocr_client=ocr_client,
        llm_client=llm_client,
        seeds=body.seeds(),
    )
    return _to_response(result)


@router.post("/process/camera", response_model=ProcessResponse)
async def process_camera(
    source: FrameSource = Depends(get_frame_source),
    ocr_client: OCRPort = Depends(get_ocr_client),
    llm_client: LLMPort = Depends(get_llm_client),
) -> ProcessResponse:
    loop = asyncio.get_running_loop()
    try:
        image = await loop.run_in_executor(None, capture_still, source)
    except CaptureError as e:
        raise to_http_error("CAMERA_UNAVAILABLE", message=str(e))
    result = await process_image(image=image, ocr_client=ocr_client, llm_client=llm_client)
    return _to_response(result)
