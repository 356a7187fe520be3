"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from attendance_capture.adapters.opencv_camera import OpenCVCaptureDevice
from attendance_capture.adapters.recognition_client import HttpxRecognitionClient
from attendance_capture.adapters.roster_sources import (
    JsonFileRosterSource,
    StaticRosterSource,
)
from attendance_capture.config import Settings
from attendance_capture.services.auth import StaticTokenProvider
from attendance_capture.services.capture import CaptureSession
from attendance_capture.services.reconciler import Reconciler
from attendance_capture.services.roster import RosterSource, RosterStore
from attendance_capture.services.sessions import SessionOrchestrator
from attendance_capture.services.uploads import UploadService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    roster: RosterStore
    orchestrator: SessionOrchestrator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    roster_source: RosterSource
    if resolved_settings.roster_path:
        roster_source = JsonFileRosterSource(Path(resolved_settings.roster_path))
    else:
        roster_source = StaticRosterSource()
    roster = RosterStore.from_source(roster_source)

    recognition_client = HttpxRecognitionClient.create()
    upload_service = UploadService(
        client=recognition_client,
        token_provider=StaticTokenProvider(resolved_settings.recognition_api_token),
        attendance_url=resolved_settings.endpoint_url(
            resolved_settings.attendance_endpoint
        ),
        registration_url=resolved_settings.endpoint_url(
            resolved_settings.registration_endpoint
        ),
        timeout_seconds=resolved_settings.upload_timeout_seconds,
    )
    capture_session = CaptureSession(
        device=OpenCVCaptureDevice(camera_index=resolved_settings.camera_index)
    )
    orchestrator = SessionOrchestrator(
        roster=roster,
        capture_session=capture_session,
        upload_service=upload_service,
        reconciler=Reconciler(roster),
    )

    async def close_resources() -> None:
        await recognition_client.close()

    return AppContainer(
        settings=resolved_settings,
        roster=roster,
        orchestrator=orchestrator,
        close_resources=close_resources,
    )
