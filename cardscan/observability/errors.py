from __future__ import annotations

from typing import Any

from fastapi import HTTPException


ERROR_REGISTRY: dict[str, dict[str, Any]] = {
    "UNSUPPORTED_FILE_TYPE": {
        "status": 400,
        "message": "Unsupported file type. Allowed: jpg, jpeg, png, gif, bmp, tif, tiff, webp",
    },
    "UPLOAD_READ_FAILED": {
        "status": 400,
        "message": "Failed to read uploaded file",
    },
    "EMPTY_FILE": {
        "status": 400,
        "message": "Uploaded file is empty",
    },
    "PAYLOAD_TOO_LARGE": {
        "status": 413,
        "message": "Uploaded file is too large",
    },
    "UNSUPPORTED_EXPORT_FORMAT": {
        "status": 400,
        "message": "Unsupported export format. Allowed: json, csv, pdf",
    },
    "CAMERA_UNAVAILABLE": {
        "status": 503,
        "message": "Camera is not available",
    },
    "INTERNAL_PROCESSING_ERROR": {
        "status": 500,
        "message": "Internal processing error",
    },
}


def to_http_error(code: str, *, message: str | None = None, status: int | None = None) -> HTTPException:
    meta = ERROR_REGISTRY.get(code, {"status": 500, "message": code})
    status_code = int(status or meta.get("status", 500))
    detail_msg = message or str(meta.get("message", code))
    return HTTPException(status_code=status_code, detail={"code": code, "message": detail_msg})
