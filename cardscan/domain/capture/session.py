"""Still-frame acquisition from a live video source.

One state machine: idle -> requesting -> streaming -> captured, with error
reachable from requesting and streaming. The device is released whenever
the session leaves the streaming state.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from cardscan.core.logging import get_logger
from cardscan.utils.images import bytes_to_data_url

logger = get_logger(__name__)


class CaptureState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    CAPTURED = "captured"
    ERROR = "error"


class CaptureError(Exception):
    """Raised on device failures and on calls the current state does not allow."""


class FrameSource(Protocol):
    """A live video capability (camera, virtual device)."""

    def open(self) -> bool: ...

    def read(self) -> Any | None: ...

    def encode_png(self, frame: Any) -> bytes: ...

    def close(self) -> None: ...


class CaptureSession:
    def __init__(self, source: FrameSource) -> None:
        self._source = source
        self._state = CaptureState.IDLE
        self._image: str | None = None
        self._error: str | None = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def image(self) -> str | None:
        """The captured frame as a PNG data URL."""
        return self._image

    @property
    def error(self) -> str | None:
        return self._error

    def _set_error(self, message: str) -> None:
        self._error = message
        self._state = CaptureState.ERROR
        logger.warning("capture_failed", extra={"error": message})

    def start(self) -> None:
        if self._state in (CaptureState.REQUESTING, CaptureState.STREAMING):
            raise CaptureError(f"Cannot start capture while {self._state.value}")
        self._image = None
        self._error = None
        self._state = CaptureState.REQUESTING
        try:
            opened = self._source.open()
        except Exception as exc:
            self._source.close()
            self._set_error(f"Could not access camera: {exc}")
            raise CaptureError(self._error) from exc
        if not opened:
            self._source.close()
            self._set_error("Could not access camera")
            raise CaptureError(self._error)
        self._state = CaptureState.STREAMING

    def capture(self) -> str:
        """Grab one frame, stop the stream and return the frame as a PNG data URL."""
        if self._state is not CaptureState.STREAMING:
            raise CaptureError(f"Cannot capture while {self._state.value}")
        try:
            frame = self._source.read()
            if frame is None:
                self._source.close()
                self._set_error("Camera returned no frame")
                raise CaptureError(self._error)
            png = self._source.encode_png(frame)
        except CaptureError:
            raise
        except Exception as exc:
            self._source.close()
            self._set_error(f"Could not capture frame: {exc}")
            raise CaptureError(self._error) from exc
        self._source.close()
        self._image = bytes_to_data_url(png, "image/png")
        self._state = CaptureState.CAPTURED
        return self._image

    def stop(self) -> None:
        if self._state in (CaptureState.REQUESTING, CaptureState.STREAMING):
            self._source.close()
        self._state = CaptureState.IDLE

    def reset(self) -> None:
        self.stop()
        self._image = None
        self._error = None

    def __enter__(self) -> "CaptureSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def capture_still(source: FrameSource) -> str:
    """Open ``source``, grab one frame and release the device."""
    with CaptureSession(source) as session:
        session.start()
        return session.capture()
