"""Webcam capture device backed by OpenCV."""

import asyncio
from dataclasses import dataclass

import cv2

from attendance_capture.services.capture import CaptureDevice


@dataclass
class OpenCVCaptureDevice(CaptureDevice):
    """Opens the camera per shot so no handle outlives a capture."""

    camera_index: int = 0
    jpeg_quality: int = 90

    async def request_permission(self) -> bool:
        """Desktop hosts grant access if the device can be opened."""
        return await asyncio.to_thread(self._can_open)

    async def is_available(self) -> bool:
        return await asyncio.to_thread(self._can_open)

    async def take_photo(self) -> bytes:
        return await asyncio.to_thread(self._grab_jpeg)

    def _can_open(self) -> bool:
        capture = cv2.VideoCapture(self.camera_index)
        try:
            return bool(capture.isOpened())
        finally:
            capture.release()

    def _grab_jpeg(self) -> bytes:
        capture = cv2.VideoCapture(self.camera_index)
        try:
            if not capture.isOpened():
                raise RuntimeError(f"Could not open camera {self.camera_index}")
            ok, frame = capture.read()
            if not ok or frame is None:
                raise RuntimeError("Camera returned no frame")
        finally:
            capture.release()
        ok, encoded = cv2.imencode(
            ".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), self.jpeg_quality]
        )
        if not ok:
            raise RuntimeError("Failed to encode frame as JPEG")
        return encoded.tobytes()
