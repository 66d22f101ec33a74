"""OpenCV-backed device camera."""

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Protocol

import cv2

from fieldforce.domain.checkpoints import CameraFacing, ErrorReason
from fieldforce.domain.errors import CameraError, FrameNotReadyError
from fieldforce.services.checkpoints import Camera

logger = logging.getLogger(__name__)


class VideoCapture(Protocol):
    """Subset of ``cv2.VideoCapture`` used by the adapter."""

    def isOpened(self) -> bool:  # noqa: N802
        """Return true when the device was opened."""

    def read(self) -> tuple[bool, object]:
        """Grab and decode the next frame."""

    def set(self, prop_id: int, value: float) -> bool:
        """Set a capture property."""

    def release(self) -> None:
        """Close the device."""


@dataclass
class OpenCVCameraStream:
    """Stream over an opened ``VideoCapture``."""

    capture: VideoCapture
    camera_facing: CameraFacing
    jpeg_quality: int = 80
    on_release: Callable[[], None] | None = None
    _active: bool = field(init=False, default=True)

    @property
    def facing(self) -> CameraFacing:
        """Return which camera the stream belongs to."""
        return self.camera_facing

    @property
    def is_active(self) -> bool:
        """Return true until the stream has been released."""
        return self._active

    def capture_frame(self) -> bytes:
        """Read one frame and encode it as JPEG."""
        if not self._active:
            raise CameraError(ErrorReason.UNKNOWN, "Camera stream was released")
        ok, frame = self.capture.read()
        shape = getattr(frame, "shape", None)
        if not ok or shape is None or len(shape) < 2 or 0 in shape[:2]:
            raise FrameNotReadyError("Camera returned an empty frame")
        ok, encoded = cv2.imencode(
            ".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), self.jpeg_quality]
        )
        if not ok:
            raise FrameNotReadyError("Frame could not be encoded")
        return encoded.tobytes()

    def release(self) -> None:
        """Close the device. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self.capture.release()
        if self.on_release is not None:
            self.on_release()


@dataclass
class OpenCVCamera(Camera):
    """Camera adapter mapping facing modes to OpenCV device indexes."""

    device_indexes: dict[CameraFacing, int]
    width: int = 640
    height: int = 640
    jpeg_quality: int = 80
    device_node_template: str | None = None
    capture_factory: Callable[[int], VideoCapture] = cv2.VideoCapture
    _in_use: set[int] = field(init=False, default_factory=set)

    @classmethod
    def create(
        cls,
        user_index: int | None,
        environment_index: int | None,
        device_node_template: str | None = None,
    ) -> "OpenCVCamera":
        """Create a camera for a front/rear device pair; None means absent."""
        indexes = {
            CameraFacing.USER: user_index,
            CameraFacing.ENVIRONMENT: environment_index,
        }
        return cls(
            device_indexes={
                facing: index for facing, index in indexes.items() if index is not None
            },
            device_node_template=device_node_template,
        )

    async def acquire(self, facing: CameraFacing) -> OpenCVCameraStream:
        """Open the device for ``facing`` in a worker thread."""
        index = self.device_indexes.get(facing)
        if index is None:
            raise CameraError(
                ErrorReason.DEVICE_NOT_FOUND, f"No {facing} camera is configured"
            )
        if index in self._in_use:
            raise CameraError(ErrorReason.DEVICE_BUSY)

        self._in_use.add(index)
        opening = asyncio.ensure_future(asyncio.to_thread(self._open, index))
        try:
            capture = await asyncio.shield(opening)
        except asyncio.CancelledError:
            # The thread keeps running; close the device once it finishes.
            opening.add_done_callback(partial(self._abandon, index))
            raise
        except BaseException:
            self._in_use.discard(index)
            raise
        return OpenCVCameraStream(
            capture=capture,
            camera_facing=facing,
            jpeg_quality=self.jpeg_quality,
            on_release=partial(self._in_use.discard, index),
        )

    def _open(self, index: int) -> VideoCapture:
        self._probe_device_node(index)
        try:
            capture = self.capture_factory(index)
            if not capture.isOpened():
                capture.release()
                raise CameraError(ErrorReason.DEVICE_NOT_FOUND)
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        except cv2.error as exc:
            raise CameraError(ErrorReason.UNKNOWN, str(exc)) from exc
        return capture

    def _probe_device_node(self, index: int) -> None:
        if self.device_node_template is None:
            return
        path = self.device_node_template.format(index=index)
        if not os.path.exists(path):
            raise CameraError(ErrorReason.DEVICE_NOT_FOUND)
        if not os.access(path, os.R_OK | os.W_OK):
            raise CameraError(ErrorReason.PERMISSION_DENIED)

    def _abandon(self, index: int, opening: asyncio.Future) -> None:
        self._in_use.discard(index)
        if opening.cancelled() or opening.exception() is not None:
            return
        opening.result().release()
        logger.info("Released camera opened after cancellation", extra={"index": index})
