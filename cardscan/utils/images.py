"""
Image type detection by magic bytes and base64 data-URL helpers.

Magic bytes reference:
- JPEG: 0xFFD8FF
- PNG:  0x89504E47 (89 P N G)
- GIF:  GIF87a / GIF89a
- BMP:  BM
- TIFF: 0x49492A00 (little-endian) or 0x4D4D002A (big-endian)
- WEBP: RIFF....WEBP
"""

from __future__ import annotations

import base64
from typing import Final, Literal

ImageType = Literal["jpeg", "png", "gif", "bmp", "tiff", "webp"]

MAGIC_BYTES_MAP: Final[dict[bytes, tuple[ImageType, str]]] = {
    b"\xff\xd8\xff": ("jpeg", "image/jpeg"),
    b"\x89PNG": ("png", "image/png"),
    b"GIF87a": ("gif", "image/gif"),
    b"GIF89a": ("gif", "image/gif"),
    b"BM": ("bmp", "image/bmp"),
    b"\x49\x49\x2a\x00": ("tiff", "image/tiff"),
    b"\x4d\x4d\x00\x2a": ("tiff", "image/tiff"),
}

DEFAULT_IMAGE_MIME: Final = "image/png"


def detect_image_type(header: bytes) -> tuple[ImageType, str] | None:
    """
    Detect image type from the first bytes of a file.

    Returns:
        Tuple of (image_type, mime_type) or None if unrecognized

    Example:
        >>> detect_image_type(b"\\x89PNG\\r\\n\\x1a\\n")
        ('png', 'image/png')
    """
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return ("webp", "image/webp")
    for signature, result in MAGIC_BYTES_MAP.items():
        if header.startswith(signature):
            return result
    return None


def is_data_url(value: str) -> bool:
    return value.startswith("data:")


def to_data_url(value: str, mime_type: str = DEFAULT_IMAGE_MIME) -> str:
    """Wrap bare base64 in a data URL; data URLs are returned unchanged."""
    value = value.strip()
    if is_data_url(value):
        return value
    return f"data:{mime_type};base64,{value}"


def bytes_to_data_url(content: bytes, mime_type: str | None = None) -> str:
    if mime_type is None:
        detected = detect_image_type(content[:12])
        mime_type = detected[1] if detected else DEFAULT_IMAGE_MIME
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
