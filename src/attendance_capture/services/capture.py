"""Camera lifecycle for a single photo acquisition."""

import logging
from dataclasses import dataclass
from typing import Protocol

from attendance_capture.domain.capture import CaptureState, PhotoArtifact
from attendance_capture.errors import (
    CaptureFailed,
    DeviceUnavailable,
    InvalidSessionState,
    PermissionDenied,
)

logger = logging.getLogger(__name__)


class CaptureDevice(Protocol):
    """Interface for the host camera."""

    async def request_permission(self) -> bool:
        """Ask for camera permission and return whether it was granted."""

    async def is_available(self) -> bool:
        """Return whether a capture device is present."""

    async def take_photo(self) -> bytes:
        """Take a photo and return encoded image bytes."""


@dataclass
class CaptureSession:
    """State machine for arming the camera and holding one captured photo.

    ``epoch`` advances whenever the live camera view is replaced (arm, retake,
    discard, release) so a shutter that resolves afterwards is dropped.
    """

    device: CaptureDevice
    permission_granted: bool = False
    state: CaptureState = CaptureState.INACTIVE
    artifact: PhotoArtifact | None = None
    epoch: int = 0

    async def request_permission(self) -> bool:
        """Ask the device for permission and remember the answer."""
        self.permission_granted = await self.device.request_permission()
        if not self.permission_granted:
            logger.warning("Camera permission denied")
        return self.permission_granted

    async def arm(self) -> None:
        """Activate the camera."""
        if self.state is not CaptureState.INACTIVE:
            raise InvalidSessionState("Camera is already active.")
        if not await self.device.is_available():
            raise DeviceUnavailable
        if not self.permission_granted:
            raise PermissionDenied
        self.epoch += 1
        self.state = CaptureState.ARMED

    async def capture(self) -> PhotoArtifact:
        """Take a photo; on device failure the session stays armed."""
        if self.state is not CaptureState.ARMED:
            raise InvalidSessionState("Camera is not ready to capture.")
        epoch = self.epoch
        try:
            image_bytes = await self.device.take_photo()
        except Exception as exc:
            if epoch != self.epoch:
                raise InvalidSessionState("Capture was cancelled.") from exc
            logger.warning("Photo capture failed: %s", exc)
            raise CaptureFailed from exc
        if epoch != self.epoch or self.state is not CaptureState.ARMED:
            logger.info("Dropping photo from a camera view that was closed")
            raise InvalidSessionState("Capture was cancelled.")
        if not image_bytes:
            raise CaptureFailed
        self._drop_artifact()
        self.artifact = PhotoArtifact.from_bytes(image_bytes)
        self.state = CaptureState.CAPTURED
        return self.artifact

    def retake(self) -> None:
        """Drop the captured photo and return to the live camera."""
        if self.state is not CaptureState.CAPTURED:
            raise InvalidSessionState("There is no photo to retake.")
        self._drop_artifact()
        self.epoch += 1
        self.state = CaptureState.ARMED

    def discard(self) -> None:
        """Drop any photo and deactivate the camera."""
        if self.state is CaptureState.INACTIVE:
            raise InvalidSessionState("Camera is not active.")
        self._drop_artifact()
        self.epoch += 1
        self.state = CaptureState.INACTIVE

    def release_artifact(self) -> None:
        """Drop the photo after a terminal upload outcome."""
        self._drop_artifact()
        self.epoch += 1
        self.state = CaptureState.INACTIVE

    def _drop_artifact(self) -> None:
        if self.artifact is not None:
            self.artifact.release()
            self.artifact = None
