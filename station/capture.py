from __future__ import annotations

import io
import logging
import pathlib
from dataclasses import dataclass
from typing import Callable, Protocol

from PIL import Image

from spotter.ai.data_uri import ImageDataUri
from spotter.ai.errors import DeviceError, ValidationError

logger = logging.getLogger(__name__)

CAMERA_DENIED_MESSAGE = (
    "Please enable camera permissions in your settings to use this feature."
)
CAMERA_UNSUPPORTED_MESSAGE = "Camera support is not available on this system."
CAPTURE_FAILED_MESSAGE = "Failed to capture a frame from the camera."

_MIME_BY_ENCODING = {"jpg": "image/jpeg", "jpeg": "image/jpeg", "png": "image/png", "webp": "image/webp"}


@dataclass
class Frame:
    """Container for a captured frame."""

    data: bytes
    encoding: str = "jpeg"

    @property
    def mime_type(self) -> str:
        return _MIME_BY_ENCODING.get(self.encoding.lower(), f"image/{self.encoding.lower()}")

    def to_data_uri(self) -> ImageDataUri:
        try:
            return ImageDataUri.from_bytes(self.data, self.mime_type)
        except ValidationError as exc:
            raise DeviceError(CAPTURE_FAILED_MESSAGE) from exc


class Camera(Protocol):
    def capture(self) -> Frame: ...

    def release(self) -> None: ...


class StubCamera:
    """Camera stand-in that serves a sample image, or a solid JPEG tile."""

    def __init__(self, sample_path: pathlib.Path | None = None) -> None:
        self._sample_path = sample_path
        self.released = False

    def capture(self) -> Frame:
        if self.released:
            raise RuntimeError("Stub camera has been released")
        if self._sample_path and self._sample_path.exists():
            data = self._sample_path.read_bytes()
            encoding = self._sample_path.suffix.lstrip(".") or "jpeg"
            return Frame(data=data, encoding=encoding)
        buffer = io.BytesIO()
        Image.new("RGB", (64, 64), color=(233, 150, 180)).save(buffer, format="JPEG")
        return Frame(data=buffer.getvalue())

    def release(self) -> None:
        self.released = True


class OpenCVCamera:
    """Capture JPEG frames from an OpenCV-compatible source (USB/RTSP)."""

    def __init__(
        self,
        source: int | str = 0,
        *,
        resolution: tuple[int, int] | None = None,
        warmup_frames: int = 2,
    ) -> None:
        try:
            import cv2  # type: ignore
        except ImportError as exc:  # pragma: no cover - depends on optional dep
            raise DeviceError(CAMERA_UNSUPPORTED_MESSAGE) from exc

        self._cv2 = cv2
        self._cap = cv2.VideoCapture(source)
        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            raise DeviceError(CAMERA_DENIED_MESSAGE)
        if resolution:
            width, height = resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, float(width))
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, float(height))
        for _ in range(max(0, warmup_frames)):
            ok, _ = self._cap.read()
            if not ok:
                break

    def capture(self) -> Frame:
        if self._cap is None:
            raise RuntimeError("Camera has been released")
        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise RuntimeError("Failed to read frame from camera")
        success, buffer = self._cv2.imencode(".jpg", frame)
        if not success:
            raise RuntimeError("OpenCV failed to encode frame as JPEG")
        return Frame(data=buffer.tobytes(), encoding="jpeg")

    def release(self) -> None:
        if getattr(self, "_cap", None) is not None:
            self._cap.release()
            self._cap = None


CameraFactory = Callable[[], Camera]


class CameraHandle:
    """Single owner of an open camera.

    ``open`` acquires the device, ``close`` releases it and may be called any
    number of times. Used as a context manager the device is released on every
    exit path.
    """

    def __init__(self, factory: CameraFactory) -> None:
        self._factory = factory
        self._camera: Camera | None = None
        self.permission: bool | None = None

    @property
    def is_open(self) -> bool:
        return self._camera is not None

    def open(self) -> "CameraHandle":
        if self._camera is not None:
            return self
        try:
            self._camera = self._factory()
        except DeviceError:
            self.permission = False
            raise
        except (RuntimeError, OSError) as exc:
            self.permission = False
            logger.warning("Camera open failed: %s", exc)
            raise DeviceError(CAMERA_DENIED_MESSAGE) from exc
        self.permission = True
        logger.debug("Camera opened via %s", self._camera.__class__.__name__)
        return self

    def capture(self) -> ImageDataUri:
        if self._camera is None:
            raise DeviceError(CAMERA_DENIED_MESSAGE)
        try:
            frame = self._camera.capture()
        except (RuntimeError, OSError) as exc:
            logger.warning("Camera capture failed: %s", exc)
            raise DeviceError(CAPTURE_FAILED_MESSAGE) from exc
        return frame.to_data_uri()

    def close(self) -> None:
        camera, self._camera = self._camera, None
        if camera is None:
            return
        try:
            camera.release()
        except Exception:
            logger.exception("Camera release failed")
        logger.debug("Camera released")

    def __enter__(self) -> "CameraHandle":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "CAMERA_DENIED_MESSAGE",
    "CAMERA_UNSUPPORTED_MESSAGE",
    "CAPTURE_FAILED_MESSAGE",
    "Camera",
    "CameraFactory",
    "CameraHandle",
    "Frame",
    "OpenCVCamera",
    "StubCamera",
]
