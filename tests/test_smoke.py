from __future__ import annotations

import base64
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from cardscan.api.dependencies import get_frame_source, get_llm_client, get_ocr_client
from cardscan.application.llm.adapters.llm_fake_adapter import FakeLLMAdapter
from cardscan.domain.pipeline.errors import LlmError
from cardscan.domain.pipeline.models import OcrResult
from cardscan.infrastructure.clients.ocr_static import StaticTextOcrClient
from cardscan.main import app

CARD_TEXT = "Doe\nJohn\nM\n1990-01-01\nID123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class ErroredOcr:
    async def recognize(self, base64_image: str) -> OcrResult:
        return OcrResult(is_errored_on_processing=True, error_message=["E301: Invalid image"])


class BrokenValidationLlm(FakeLLMAdapter):
    async def validate_fields(self, record):
        raise LlmError("LLM request failed: connection reset")


class ClosedCamera:
    def open(self) -> bool:
        return False

    def read(self):
        return None

    def encode_png(self, frame) -> bytes:
        return b""

    def close(self) -> None:
        pass


@pytest.fixture
def client() -> Iterator[TestClient]:
    app.dependency_overrides[get_ocr_client] = lambda: StaticTextOcrClient(CARD_TEXT)
    app.dependency_overrides[get_llm_client] = lambda: FakeLLMAdapter()
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


def test_health_and_ready(client: TestClient) -> None:
    assert client.get("/health").json()["status"] == "ok"
    ready = client.get("/ready").json()
    assert ready["status"] == "ok"
    assert ready["usesDefaultKey"] is True


def test_request_id_is_echoed(client: TestClient) -> None:
    r = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"
    generated = client.get("/health").headers.get("X-Request-ID")
    assert generated


def test_process_upload(client: TestClient) -> None:
    r = client.post(
        "/v1/process",
        files={"file": ("card.png", PNG_BYTES, "image/png")},
        data={"surname": "Smith"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["error"] is None
    assert body["rawOcrText"] == CARD_TEXT
    assert body["usesDefaultKey"] is True
    assert body["data"] == {
        "surname": "Smith",
        "firstName": "John",
        "gender": "M",
        "dateOfBirth": "1990-01-01",
        "idNumber": "ID123",
    }


def test_process_upload_seed_aliases(client: TestClient) -> None:
    r = client.post(
        "/v1/process",
        files={"file": ("card.png", PNG_BYTES, "image/png")},
        data={"firstName": "Jim", "idNumber": "X9"},
    )
    data = r.json()["data"]
    assert data["firstName"] == "Jim"
    assert data["idNumber"] == "X9"


def test_process_upload_rejects_unknown_extension(client: TestClient) -> None:
    r = client.post("/v1/process", files={"file": ("card.txt", b"hello", "text/plain")})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "UNSUPPORTED_FILE_TYPE"


def test_process_upload_rejects_non_image_content(client: TestClient) -> None:
    r = client.post("/v1/process", files={"file": ("card.png", b"not an image", "image/png")})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "UNSUPPORTED_FILE_TYPE"


def test_process_upload_rejects_empty_file(client: TestClient) -> None:
    r = client.post("/v1/process", files={"file": ("card.png", b"", "image/png")})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "EMPTY_FILE"


def test_process_base64(client: TestClient) -> None:
    image = base64.b64encode(PNG_BYTES).decode()
    r = client.post("/v1/process/base64", json={"image": image, "dateOfBirth": "1991-02-03"})
    assert r.status_code == 200
    assert r.json()["data"]["dateOfBirth"] == "1991-02-03"


def test_process_base64_requires_image(client: TestClient) -> None:
    r = client.post("/v1/process/base64", json={"image": ""})
    assert r.status_code == 422


def test_process_reports_ocr_failure_in_body(client: TestClient) -> None:
    app.dependency_overrides[get_ocr_client] = lambda: ErroredOcr()
    r = client.post("/v1/process/base64", json={"image": "aGVsbG8="})
    assert r.status_code == 200
    body = r.json()
    assert body["data"] is None
    assert body["error"] == "OCR processing failed: E301: Invalid image"
    assert body["rawOcrText"] is None


def test_validate(client: TestClient) -> None:
    r = client.post(
        "/v1/validate",
        json={"surname": "Doe", "firstName": "John", "gender": "M", "dateOfBirth": "1990-01-01", "idNumber": "ID1"},
    )
    assert r.status_code == 200
    assert r.json() == {"validationResult": "All fields look consistent.", "type": "success", "error": None}


def test_validate_informational(client: TestClient) -> None:
    r = client.post("/v1/validate", json={"surname": "Doe", "firstName": "John", "idNumber": "ID1"})
    body = r.json()
    assert body["type"] == "info"
    assert "gender is missing" in body["validationResult"]


def test_validate_requires_core_fields(client: TestClient) -> None:
    r = client.post("/v1/validate", json={"surname": "", "firstName": "John", "idNumber": "ID1"})
    assert r.status_code == 422


def test_validate_error_outcome(client: TestClient) -> None:
    app.dependency_overrides[get_llm_client] = lambda: BrokenValidationLlm()
    r = client.post("/v1/validate", json={"surname": "Doe", "firstName": "John", "idNumber": "ID1"})
    assert r.status_code == 200
    assert r.json() == {
        "validationResult": None,
        "type": "error",
        "error": "LLM request failed: connection reset",
    }


@pytest.mark.parametrize(
    "fmt,content_type,filename",
    [
        ("json", "application/json", "id-data.json"),
        ("csv", "text/csv", "id-data.csv"),
        ("pdf", "application/pdf", "id-data.pdf"),
    ],
)
def test_export(client: TestClient, fmt: str, content_type: str, filename: str) -> None:
    r = client.post(f"/v1/export/{fmt}", json={"surname": "Doe", "firstName": "John"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(content_type)
    assert r.headers["content-disposition"] == f'attachment; filename="{filename}"'


def test_export_unknown_format(client: TestClient) -> None:
    r = client.post("/v1/export/xml", json={"surname": "Doe"})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "UNSUPPORTED_EXPORT_FORMAT"


def test_camera_unavailable(client: TestClient) -> None:
    app.dependency_overrides[get_frame_source] = lambda: ClosedCamera()
    r = client.post("/v1/process/camera")
    assert r.status_code == 503
    assert r.json()["detail"]["code"] == "CAMERA_UNAVAILABLE"


def test_metrics_endpoint(client: TestClient) -> None:
    client.post("/v1/process/base64", json={"image": "aGVsbG8="})
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "pipeline_runs_total" in r.text
    assert "http_requests_total" in r.text


def test_malformed_request_id_is_replaced(client: TestClient) -> None:
    r = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
    assert r.headers["X-Request-ID"] != "bad id with spaces"
    assert len(r.headers["X-Request-ID"]) == 32
