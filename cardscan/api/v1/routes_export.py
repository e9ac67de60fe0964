from __future__ import annotations

from fastapi import APIRouter, Response

from cardscan.application.export.exporters import EXPORT_FORMATS
from cardscan.domain.pipeline.models import ExtractedRecord
from cardscan.observability.errors import to_http_error

router = APIRouter(prefix="/v1", tags=["export"])


@router.post("/export/{fmt}")
async def export_record(fmt: str, record: ExtractedRecord) -> Response:
    export_format = EXPORT_FORMATS.get(fmt.lower())
    if export_format is None:
        raise to_http_error("UNSUPPORTED_EXPORT_FORMAT")
    return Response(
        content=export_format.render(record),
        media_type=export_format.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export_format.filename()}"'},
    )
