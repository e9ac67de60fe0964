"""Record exports: JSON, CSV and a one-page PDF."""

from __future__ import annotations

import io
import json
import re
from dataclasses import dataclass
from typing import Callable

from PIL import Image, ImageDraw, ImageFont

from cardscan.core.config import get_settings
from cardscan.core.logging import get_logger
from cardscan.domain.pipeline.models import ExtractedRecord

logger = get_logger(__name__)

PDF_TITLE = "Extracted ID Card Data"

# Unicode-capable fonts commonly present on Linux, macOS and Windows hosts.
# Pillow resolves bare file names against the system font directories.
PDF_FONT_CANDIDATES: tuple[str, ...] = (
    "DejaVuSans.ttf",
    "NotoSans-Regular.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    "arialuni.ttf",
    "arial.ttf",
)

# A4 at 150 dpi
_PAGE_SIZE = (1240, 1754)
_PDF_RESOLUTION = 150.0
_MARGIN_X = 90
_TITLE_Y = 110
_FIRST_LINE_Y = 220
_LINE_HEIGHT = 62


def field_label(name: str) -> str:
    """``dateOfBirth`` -> ``Date Of Birth``."""
    spaced = re.sub(r"([A-Z])", r" \1", name)
    return spaced[:1].upper() + spaced[1:]


def export_json(record: ExtractedRecord) -> str:
    return json.dumps(record.to_wire(), indent=2, ensure_ascii=False)


def export_csv(record: ExtractedRecord) -> str:
    data = record.to_wire()
    header = ",".join(data.keys())
    values = ",".join('"' + value.replace('"', '""') + '"' for value in data.values())
    return f"{header}\n{values}"


def _load_font(size: int, font_path: str | None = None):
    """First TrueType font that loads, else Pillow's built-in (Latin-only) font."""
    candidates = ([font_path] if font_path else []) + list(PDF_FONT_CANDIDATES)
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    logger.warning("pdf_font_fallback", extra={"tried": candidates})
    return ImageFont.load_default(size=size)


def export_pdf(record: ExtractedRecord, *, font_path: str | None = None) -> bytes:
    page = Image.new("RGB", _PAGE_SIZE, "white")
    draw = ImageDraw.Draw(page)
    title_font = _load_font(44, font_path)
    body_font = _load_font(30, font_path)

    draw.text((_MARGIN_X, _TITLE_Y), PDF_TITLE, fill="black", font=title_font)
    y = _FIRST_LINE_Y
    for name, value in record.to_wire().items():
        draw.text((_MARGIN_X, y), f"{field_label(name)}: {value}", fill="black", font=body_font)
        y += _LINE_HEIGHT

    buf = io.BytesIO()
    page.save(buf, format="PDF", resolution=_PDF_RESOLUTION)
    return buf.getvalue()


def _render_pdf(record: ExtractedRecord) -> bytes:
    return export_pdf(record, font_path=get_settings().PDF_FONT_PATH)


@dataclass(frozen=True)
class ExportFormat:
    media_type: str
    extension: str
    render: Callable[[ExtractedRecord], str | bytes]

    def filename(self, stem: str = "id-data") -> str:
        return f"{stem}.{self.extension}"


EXPORT_FORMATS: dict[str, ExportFormat] = {
    "json": ExportFormat("application/json", "json", export_json),
    "csv": ExportFormat("text/csv; charset=utf-8", "csv", export_csv),
    "pdf": ExportFormat("application/pdf", "pdf", _render_pdf),
}
