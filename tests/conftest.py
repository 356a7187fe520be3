"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field

import pytest

from attendance_capture.adapters.roster_sources import StaticRosterSource
from attendance_capture.config import Settings
from attendance_capture.containers import AppContainer
from attendance_capture.domain.capture import PhotoArtifact
from attendance_capture.services.auth import StaticTokenProvider
from attendance_capture.services.capture import CaptureDevice, CaptureSession
from attendance_capture.services.reconciler import Reconciler
from attendance_capture.services.roster import RosterStore
from attendance_capture.services.sessions import SessionOrchestrator
from attendance_capture.services.uploads import (
    FilePart,
    RawResponse,
    RecognitionClient,
    UploadService,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


def json_response(status_code: int, payload: object) -> RawResponse:
    return RawResponse(status_code=status_code, body=json.dumps(payload).encode())


def make_artifact(content: bytes = JPEG_BYTES) -> PhotoArtifact:
    return PhotoArtifact.from_bytes(content)


@dataclass
class FakeCaptureDevice(CaptureDevice):
    """Fake camera that returns numbered JPEG payloads."""

    available: bool = True
    grant: bool = True
    fail_next: bool = False
    gate: asyncio.Event | None = None
    shots: int = 0

    async def request_permission(self) -> bool:
        return self.grant

    async def is_available(self) -> bool:
        return self.available

    async def take_photo(self) -> bytes:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_next:
            self.fail_next = False
            raise RuntimeError("shutter jammed")
        self.shots += 1
        return JPEG_BYTES + str(self.shots).encode()


@dataclass
class FakeRecognitionClient(RecognitionClient):
    """Fake recognition service that replays queued responses."""

    responses: list[RawResponse | Exception] = field(default_factory=list)
    requests: list[dict[str, object]] = field(default_factory=list)
    started: asyncio.Event = field(default_factory=asyncio.Event)
    gate: asyncio.Event | None = None

    async def post_multipart(
        self,
        url: str,
        *,
        fields: dict[str, str],
        files: dict[str, FilePart],
        token: str | None,
        timeout: float,
    ) -> RawResponse:
        self.requests.append(
            {"url": url, "fields": fields, "files": files, "token": token}
        )
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def build_upload_service(
    client: RecognitionClient, timeout_seconds: float = 30.0
) -> UploadService:
    return UploadService(
        client=client,
        token_provider=StaticTokenProvider("service-token"),
        attendance_url="https://recognition.test/upload-photo",
        registration_url="https://recognition.test/register-student",
        timeout_seconds=timeout_seconds,
    )


def build_roster() -> RosterStore:
    return RosterStore.from_source(StaticRosterSource())


def build_orchestrator(
    device: FakeCaptureDevice,
    client: FakeRecognitionClient,
    roster: RosterStore | None = None,
) -> SessionOrchestrator:
    resolved_roster = roster or build_roster()
    return SessionOrchestrator(
        roster=resolved_roster,
        capture_session=CaptureSession(device=device, permission_granted=True),
        upload_service=build_upload_service(client),
        reconciler=Reconciler(resolved_roster),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        operator_token="operator-token",
        recognition_base_url="https://recognition.test",
        recognition_api_token="service-token",
    )


@pytest.fixture
def device() -> FakeCaptureDevice:
    return FakeCaptureDevice()


@pytest.fixture
def recognition_client() -> FakeRecognitionClient:
    return FakeRecognitionClient()


@pytest.fixture
def roster() -> RosterStore:
    return build_roster()


@pytest.fixture
def orchestrator(
    device: FakeCaptureDevice,
    recognition_client: FakeRecognitionClient,
    roster: RosterStore,
) -> SessionOrchestrator:
    return build_orchestrator(device, recognition_client, roster)


@pytest.fixture
def container(
    settings: Settings,
    roster: RosterStore,
    orchestrator: SessionOrchestrator,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        roster=roster,
        orchestrator=orchestrator,
        close_resources=close_resources,
    )
