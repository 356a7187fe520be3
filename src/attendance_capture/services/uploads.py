"""Upload jobs: send a captured photo and classify the response."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from attendance_capture.domain.capture import PhotoArtifact
from attendance_capture.domain.uploads import (
    AttendanceRecognition,
    JobKind,
    NetworkFailure,
    RegistrationConfirmation,
    RemoteRejected,
    UploadOutcome,
    UploadSuccess,
)
from attendance_capture.errors import JobInProgress, UploadTransportError
from attendance_capture.services.auth import TokenProvider

logger = logging.getLogger(__name__)

MALFORMED_RESPONSE = "malformed response"

FilePart = tuple[str, bytes, str]


@dataclass(frozen=True)
class RawResponse:
    """Status code and raw body of a recognition service reply."""

    status_code: int
    body: bytes


class RecognitionClient(Protocol):
    """Interface for the recognition service transport."""

    async def post_multipart(
        self,
        url: str,
        *,
        fields: dict[str, str],
        files: dict[str, FilePart],
        token: str | None,
        timeout: float,
    ) -> RawResponse:
        """POST a multipart body; raise UploadTransportError without a reply."""


@dataclass
class UploadService:
    """Performs one network round trip per submitted photo."""

    client: RecognitionClient
    token_provider: TokenProvider
    attendance_url: str
    registration_url: str
    timeout_seconds: float = 30.0
    _in_flight: bool = field(default=False, init=False)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def submit(self, artifact: PhotoArtifact, kind: JobKind) -> UploadOutcome:
        """Upload the artifact and return exactly one outcome."""
        if self._in_flight:
            raise JobInProgress
        image_bytes = artifact.read()
        url, fields, filename = self._request_parts(kind, image_bytes)
        mime_type = _detect_mime_type(image_bytes)
        self._in_flight = True
        try:
            response = await asyncio.wait_for(
                self.client.post_multipart(
                    url,
                    fields=fields,
                    files={"photo": (filename, image_bytes, mime_type)},
                    token=self.token_provider.get_token(),
                    timeout=self.timeout_seconds,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            logger.warning("Upload to %s timed out", url)
            return NetworkFailure(detail="timeout")
        except UploadTransportError as exc:
            logger.warning("Upload to %s failed: %s", url, exc.message)
            return NetworkFailure(detail=exc.message)
        finally:
            self._in_flight = False

        outcome = classify_response(kind, response)
        logger.info(
            "Upload %s finished with status %s: %s",
            kind.type,
            response.status_code,
            type(outcome).__name__,
        )
        return outcome

    def _request_parts(
        self, kind: JobKind, image_bytes: bytes
    ) -> tuple[str, dict[str, str], str]:
        extension = _extension_for(_detect_mime_type(image_bytes))
        if kind.is_attendance:
            return self.attendance_url, {}, f"attendance.{extension}"
        if not kind.person_id:
            raise ValueError("Registration jobs require a person id")
        return (
            self.registration_url,
            {"studentId": kind.person_id},
            f"photo.{extension}",
        )


def classify_response(kind: JobKind, response: RawResponse) -> UploadOutcome:
    """Turn a raw reply into Success or RemoteRejected."""
    body = _decode_json(response.body)
    if not 200 <= response.status_code < 300:  # noqa: PLR2004
        return RemoteRejected(_error_message(body) or _fallback_message(kind))
    if not isinstance(body, dict):
        return RemoteRejected(MALFORMED_RESPONSE)
    if body.get("success") is False or "error" in body:
        return RemoteRejected(_error_message(body) or _fallback_message(kind))

    payload: AttendanceRecognition | RegistrationConfirmation
    try:
        if kind.is_attendance:
            payload = AttendanceRecognition.model_validate(body)
        else:
            payload = RegistrationConfirmation.model_validate(body)
    except ValidationError:
        return RemoteRejected(MALFORMED_RESPONSE)

    if (
        isinstance(payload, RegistrationConfirmation)
        and payload.student_id is not None
        and payload.student_id != kind.person_id
    ):
        return RemoteRejected(MALFORMED_RESPONSE)
    return UploadSuccess(payload=payload)


def _decode_json(raw: bytes) -> object | None:
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _error_message(body: object | None) -> str | None:
    """Pull the server-supplied reason from an error body."""
    if not isinstance(body, dict):
        return None
    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _fallback_message(kind: JobKind) -> str:
    if kind.is_attendance:
        return "Failed to upload."
    return "Failed to register."


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _extension_for(mime_type: str) -> str:
    return {"image/png": "png", "image/webp": "webp"}.get(mime_type, "jpg")
