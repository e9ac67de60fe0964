from __future__ import annotations

import base64

import pytest

from cardscan.domain.capture.session import CaptureError, CaptureSession, CaptureState, capture_still

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class FakeSource:
    def __init__(self, *, opens: bool = True, frame: object | None = "frame", open_exc: Exception | None = None):
        self.opens = opens
        self.frame = frame
        self.open_exc = open_exc
        self.closed = 0

    def open(self) -> bool:
        if self.open_exc is not None:
            raise self.open_exc
        return self.opens

    def read(self):
        return self.frame

    def encode_png(self, frame) -> bytes:
        return PNG_BYTES

    def close(self) -> None:
        self.closed += 1


def test_capture_returns_png_data_url_and_releases_device() -> None:
    source = FakeSource()
    session = CaptureSession(source)

    session.start()
    assert session.state is CaptureState.STREAMING
    image = session.capture()

    assert session.state is CaptureState.CAPTURED
    assert image == "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
    assert session.image == image
    assert source.closed == 1


def test_device_refusal_moves_to_error() -> None:
    source = FakeSource(opens=False)
    session = CaptureSession(source)

    with pytest.raises(CaptureError, match="Could not access camera"):
        session.start()
    assert session.state is CaptureState.ERROR
    assert session.error == "Could not access camera"
    assert source.closed == 1


def test_open_exception_moves_to_error() -> None:
    session = CaptureSession(FakeSource(open_exc=PermissionError("denied")))
    with pytest.raises(CaptureError, match="denied"):
        session.start()
    assert session.state is CaptureState.ERROR


def test_missing_frame_moves_to_error() -> None:
    source = FakeSource(frame=None)
    session = CaptureSession(source)
    session.start()
    with pytest.raises(CaptureError, match="no frame"):
        session.capture()
    assert session.state is CaptureState.ERROR
    assert source.closed == 1


def test_capture_requires_streaming() -> None:
    session = CaptureSession(FakeSource())
    with pytest.raises(CaptureError):
        session.capture()
    assert session.state is CaptureState.IDLE


def test_start_twice_is_rejected() -> None:
    session = CaptureSession(FakeSource())
    session.start()
    with pytest.raises(CaptureError):
        session.start()


def test_stop_releases_device_and_retry_after_error() -> None:
    source = FakeSource(opens=False)
    session = CaptureSession(source)
    with pytest.raises(CaptureError):
        session.start()

    source.opens = True
    session.start()
    assert session.state is CaptureState.STREAMING
    session.stop()
    assert session.state is CaptureState.IDLE
    assert source.closed == 2


def test_reset_clears_image() -> None:
    session = CaptureSession(FakeSource())
    session.start()
    session.capture()
    session.reset()
    assert session.state is CaptureState.IDLE
    assert session.image is None


def test_capture_still_context_releases_on_error() -> None:
    source = FakeSource(frame=None)
    with pytest.raises(CaptureError):
        capture_still(source)
    assert source.closed >= 1


def test_opencv_source_with_fake_capture() -> None:
    cv2 = pytest.importorskip("cv2")
    np = pytest.importorskip("numpy")

    from cardscan.infrastructure.capture.opencv_source import OpenCvFrameSource

    class FakeCapture:
        def __init__(self, device: int) -> None:
            self.device = device
            self.props: dict[int, float] = {}
            self.released = False

        def isOpened(self) -> bool:
            return True

        def set(self, prop: int, value: float) -> bool:
            self.props[prop] = value
            return True

        def read(self):
            return True, np.zeros((8, 8, 3), dtype=np.uint8)

        def release(self) -> None:
            self.released = True

    captures: list[FakeCapture] = []

    def factory(device: int) -> FakeCapture:
        cap = FakeCapture(device)
        captures.append(cap)
        return cap

    source = OpenCvFrameSource(device=2, capture_factory=factory)
    image = capture_still(source)

    assert image.startswith("data:image/png;base64,")
    assert base64.b64decode(image.split(",", 1)[1]).startswith(b"\x89PNG")
    assert captures[0].device == 2
    assert captures[0].props[cv2.CAP_PROP_FRAME_WIDTH] == 1440
    assert captures[0].released


def test_opencv_source_closed_device() -> None:
    pytest.importorskip("cv2")
    from cardscan.infrastructure.capture.opencv_source import OpenCvFrameSource

    class ClosedCapture:
        def __init__(self, device: int) -> None:
            pass

        def isOpened(self) -> bool:
            return False

        def release(self) -> None:
            pass

    with pytest.raises(CaptureError):
        capture_still(OpenCvFrameSource(capture_factory=ClosedCapture))
