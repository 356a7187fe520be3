"""Tests for the camera capture session."""

import asyncio

import pytest

from attendance_capture.domain.capture import CaptureState, PhotoArtifact
from attendance_capture.errors import (
    ArtifactReleased,
    CaptureFailed,
    DeviceUnavailable,
    InvalidSessionState,
    PermissionDenied,
)
from attendance_capture.services.capture import CaptureSession
from tests.conftest import JPEG_BYTES, FakeCaptureDevice


def _armed_session(device: FakeCaptureDevice | None = None) -> CaptureSession:
    session = CaptureSession(device=device or FakeCaptureDevice())
    asyncio.run(session.request_permission())
    asyncio.run(session.arm())
    return session


def test_arm_requires_a_device() -> None:
    session = CaptureSession(device=FakeCaptureDevice(available=False))
    asyncio.run(session.request_permission())

    with pytest.raises(DeviceUnavailable):
        asyncio.run(session.arm())

    assert session.state is CaptureState.INACTIVE


def test_arm_requires_prior_permission() -> None:
    session = CaptureSession(device=FakeCaptureDevice())

    with pytest.raises(PermissionDenied):
        asyncio.run(session.arm())

    denied = CaptureSession(device=FakeCaptureDevice(grant=False))
    assert asyncio.run(denied.request_permission()) is False
    with pytest.raises(PermissionDenied):
        asyncio.run(denied.arm())


def test_capture_produces_artifact() -> None:
    session = _armed_session()

    artifact = asyncio.run(session.capture())

    assert session.state is CaptureState.CAPTURED
    assert session.artifact is artifact
    assert artifact.read().startswith(b"\xff\xd8\xff")
    assert artifact.local_ref


def test_capture_failure_keeps_session_armed() -> None:
    device = FakeCaptureDevice(fail_next=True)
    session = _armed_session(device)

    with pytest.raises(CaptureFailed):
        asyncio.run(session.capture())

    assert session.state is CaptureState.ARMED
    assert session.artifact is None
    asyncio.run(session.capture())
    assert session.state is CaptureState.CAPTURED


def test_retake_releases_the_previous_photo() -> None:
    session = _armed_session()
    first = asyncio.run(session.capture())

    session.retake()

    assert session.state is CaptureState.ARMED
    assert session.artifact is None
    assert first.released
    with pytest.raises(ArtifactReleased):
        first.read()


def test_discard_releases_and_deactivates() -> None:
    session = _armed_session()
    artifact = asyncio.run(session.capture())

    session.discard()

    assert session.state is CaptureState.INACTIVE
    assert artifact.released
    with pytest.raises(InvalidSessionState):
        session.discard()


def test_operations_outside_their_state_are_rejected() -> None:
    session = CaptureSession(device=FakeCaptureDevice(), permission_granted=True)

    with pytest.raises(InvalidSessionState):
        asyncio.run(session.capture())
    with pytest.raises(InvalidSessionState):
        session.retake()

    asyncio.run(session.arm())
    with pytest.raises(InvalidSessionState):
        asyncio.run(session.arm())
    with pytest.raises(InvalidSessionState):
        session.retake()


def test_at_most_one_artifact_is_live_across_any_sequence() -> None:
    session = _armed_session()
    created: list[PhotoArtifact] = []

    def live_count() -> int:
        return sum(1 for artifact in created if not artifact.released)

    steps = ["capture", "retake", "capture", "discard", "arm", "capture", "retake"]
    steps += ["capture", "discard"]
    for step in steps:
        if step == "capture":
            created.append(asyncio.run(session.capture()))
        elif step == "arm":
            asyncio.run(session.arm())
        else:
            getattr(session, step)()
        assert live_count() <= 1

    assert live_count() == 0
    for artifact in created:
        with pytest.raises(ArtifactReleased):
            artifact.read()


def test_capture_discarded_while_shutter_pending_leaves_no_artifact() -> None:
    device = FakeCaptureDevice(gate=asyncio.Event())
    session = CaptureSession(device=device, permission_granted=True)

    async def scenario() -> None:
        await session.arm()
        task = asyncio.create_task(session.capture())
        await asyncio.sleep(0)
        session.discard()
        device.gate.set()
        with pytest.raises(InvalidSessionState):
            await task

    asyncio.run(scenario())

    assert session.state is CaptureState.INACTIVE
    assert session.artifact is None


def test_shot_pending_across_discard_and_rearm_is_dropped() -> None:
    device = FakeCaptureDevice(gate=asyncio.Event())
    session = CaptureSession(device=device, permission_granted=True)

    async def scenario() -> None:
        await session.arm()
        stale = asyncio.create_task(session.capture())
        await asyncio.sleep(0)
        session.discard()
        await session.arm()
        device.gate.set()
        with pytest.raises(InvalidSessionState):
            await stale

        assert session.state is CaptureState.ARMED
        assert session.artifact is None

        fresh = await session.capture()
        assert fresh.read() == JPEG_BYTES + b"2"

    asyncio.run(scenario())

    assert session.state is CaptureState.CAPTURED


def test_second_concurrent_shot_is_dropped() -> None:
    device = FakeCaptureDevice(gate=asyncio.Event())
    session = CaptureSession(device=device, permission_granted=True)

    async def scenario() -> None:
        await session.arm()
        first = asyncio.create_task(session.capture())
        second = asyncio.create_task(session.capture())
        await asyncio.sleep(0)
        device.gate.set()
        kept = await first
        session.retake()
        with pytest.raises(InvalidSessionState):
            await second
        assert kept.released

    asyncio.run(scenario())

    assert session.state is CaptureState.ARMED
    assert session.artifact is None


def test_release_zeroes_the_buffer() -> None:
    artifact = PhotoArtifact.from_bytes(b"abc")
    buffer = artifact.data
    assert buffer is not None

    artifact.release()
    artifact.release()

    assert bytes(buffer) == b"\x00\x00\x00"
    assert artifact.released
