"""Session, roster and attendance endpoints with operator token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from attendance_capture.api.models import StartCaptureRequest  # noqa: TC001
from attendance_capture.domain.uploads import JobKind

if TYPE_CHECKING:
    from attendance_capture.containers import AppContainer
    from attendance_capture.domain.roster import Person
    from attendance_capture.domain.sessions import (
        ReconciliationResult,
        SessionView,
    )
    from attendance_capture.services.sessions import SessionOrchestrator


def _get_operator_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.operator_token


async def require_operator(
    x_operator_token: str | None = Header(default=None),
    operator_token: str = Depends(_get_operator_token),
) -> None:
    """Ensure requests include a valid operator token."""
    if not x_operator_token or x_operator_token != operator_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(dependencies=[Depends(require_operator)])


def _orchestrator(request: Request) -> SessionOrchestrator:
    container: AppContainer = request.app.state.container
    return container.orchestrator


@router.get("/session")
async def session_view(request: Request) -> dict[str, object]:
    """Return the current session view."""
    return _view_payload(_orchestrator(request).view())


@router.post("/session/permission")
async def request_permission(request: Request) -> dict[str, object]:
    """Ask the host for camera permission."""
    granted = await _orchestrator(request).request_camera_permission()
    return {"granted": granted}


@router.post("/session/start")
async def start_capture(
    body: StartCaptureRequest, request: Request
) -> dict[str, object]:
    """Arm the camera for attendance or registration."""
    if body.mode == "registration":
        kind = JobKind.registration(body.student_id or "")
    else:
        kind = JobKind.attendance()
    view = await _orchestrator(request).start_smart_capture(kind)
    return _view_payload(view)


@router.post("/session/capture")
async def capture(request: Request) -> dict[str, object]:
    return _view_payload(await _orchestrator(request).capture())


@router.post("/session/retake")
async def retake(request: Request) -> dict[str, object]:
    return _view_payload(_orchestrator(request).retake())


@router.post("/session/discard")
async def discard(request: Request) -> dict[str, object]:
    return _view_payload(_orchestrator(request).discard())


@router.post("/session/cancel")
async def cancel(request: Request) -> dict[str, object]:
    return _view_payload(_orchestrator(request).cancel())


@router.post("/session/upload")
async def upload(request: Request) -> dict[str, object]:
    """Upload the captured photo and return the reconciled view."""
    return _view_payload(await _orchestrator(request).confirm_upload())


@router.post("/session/acknowledge")
async def acknowledge(request: Request) -> dict[str, object]:
    return _view_payload(_orchestrator(request).acknowledge())


@router.get("/roster")
async def roster(request: Request) -> dict[str, object]:
    """Return the roster with presence and registration flags."""
    people = _orchestrator(request).people()
    return {"students": [_person_payload(person) for person in people]}


@router.post("/roster/{student_id}/toggle")
async def toggle_presence(student_id: str, request: Request) -> dict[str, object]:
    """Manually flip a student's presence."""
    person = _orchestrator(request).toggle_manual(student_id)
    return _person_payload(person)


@router.post("/attendance/rounds")
async def start_round(request: Request) -> dict[str, str]:
    """Reset presence for a new attendance round."""
    _orchestrator(request).start_attendance_round()
    return {"status": "ok"}


@router.post("/attendance/submit")
async def submit_round(request: Request) -> dict[str, object]:
    """Return the present/absent summary for the round."""
    summary = _orchestrator(request).submit_attendance_round()
    return {
        "present": list(summary.present_names),
        "absent": list(summary.absent_names),
        "message": _format_summary(summary.present_names, summary.absent_names),
    }


def _view_payload(view: SessionView) -> dict[str, object]:
    return {
        "state": str(view.state),
        "mode": view.mode,
        "student_id": view.student_id,
        "has_photo": view.has_photo,
        "message": view.message,
        "result": _result_payload(view.result) if view.result else None,
    }


def _result_payload(result: ReconciliationResult) -> dict[str, object]:
    return {
        "succeeded": result.succeeded,
        "message": result.message,
        "present": list(result.present_names),
        "absent": list(result.absent_names),
        "registered_name": result.registered_name,
    }


def _person_payload(person: Person) -> dict[str, object]:
    return {
        "id": person.id,
        "name": person.name,
        "present": person.present,
        "registered": person.registered,
    }


def _format_summary(present: tuple[str, ...], absent: tuple[str, ...]) -> str:
    present_text = ", ".join(present) or "None"
    absent_text = ", ".join(absent) or "None"
    return f"Present: {present_text}\nAbsent: {absent_text}"
