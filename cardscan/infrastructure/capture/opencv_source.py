from __future__ import annotations

from typing import Any, Callable

import cv2


class OpenCvFrameSource:
    """FrameSource backed by ``cv2.VideoCapture``."""

    def __init__(
        self,
        device: int = 0,
        *,
        width: int | None = 1440,
        height: int | None = 720,
        capture_factory: Callable[[int], Any] = cv2.VideoCapture,
    ) -> None:
        self._device = device
        self._width = width
        self._height = height
        self._capture_factory = capture_factory
        self._cap: Any | None = None

    def open(self) -> bool:
        self._cap = self._capture_factory(self._device)
        if not self._cap.isOpened():
            return False
        if self._width:
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        if self._height:
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        return True

    def read(self) -> Any | None:
        if self._cap is None:
            return None
        ret, frame = self._cap.read()
        return frame if ret else None

    def encode_png(self, frame: Any) -> bytes:
        ok, buf = cv2.imencode(".png", frame)
        if not ok:
            raise RuntimeError("PNG encoding failed")
        return buf.tobytes()

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
