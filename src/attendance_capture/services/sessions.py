"""Session orchestrator for smart-capture attendance and registration."""

import logging
from dataclasses import dataclass

from attendance_capture.domain.roster import Person
from attendance_capture.domain.sessions import (
    AttendanceSummary,
    ReconciliationResult,
    SessionState,
    SessionView,
)
from attendance_capture.domain.uploads import JobKind
from attendance_capture.errors import (
    AttendanceError,
    InvalidSessionState,
    JobInProgress,
    NothingToSubmit,
)
from attendance_capture.services.capture import CaptureSession
from attendance_capture.services.reconciler import Reconciler
from attendance_capture.services.roster import RosterStore
from attendance_capture.services.uploads import UploadService

logger = logging.getLogger(__name__)

_DISCARDABLE = {SessionState.ARMED, SessionState.CAPTURED, SessionState.UPLOADING}


@dataclass
class SessionOrchestrator:
    """State machine sequencing capture, upload and reconciliation.

    Every public operation runs on the caller's event loop. The only
    suspension points are the camera shutter and the upload round trip;
    ``generation`` advances on discard so a response that arrives after the
    user walked away is dropped instead of reconciled.
    """

    roster: RosterStore
    capture_session: CaptureSession
    upload_service: UploadService
    reconciler: Reconciler
    state: SessionState = SessionState.IDLE
    kind: JobKind | None = None
    message: str | None = None
    last_result: ReconciliationResult | None = None
    generation: int = 0

    def view(self) -> SessionView:
        """Return the presentation view of the current state."""
        return render_view(
            state=self.state,
            kind=self.kind,
            has_photo=self.capture_session.artifact is not None,
            message=self.message,
            result=self.last_result,
        )

    def people(self) -> tuple[Person, ...]:
        return self.roster.list_people()

    async def request_camera_permission(self) -> bool:
        """Ask for camera permission ahead of arming."""
        granted = await self.capture_session.request_permission()
        self.message = None if granted else "Camera permission denied."
        return granted

    async def start_smart_capture(self, kind: JobKind) -> SessionView:
        """Arm the camera for an attendance or registration photo."""
        self._ensure_no_upload()
        self._require(SessionState.IDLE)
        if kind.person_id is not None:
            self.roster.get(kind.person_id)

        self.kind = kind
        self.message = None
        self.last_result = None
        self._transition(SessionState.ARMING)
        try:
            await self.capture_session.arm()
        except AttendanceError as exc:
            self.kind = None
            self.message = exc.message
            self._transition(SessionState.IDLE)
            raise
        self._transition(SessionState.ARMED)
        return self.view()

    async def capture(self) -> SessionView:
        """Take the photo; a failed shutter leaves the camera armed."""
        self._require(SessionState.ARMED)
        token = self.generation
        try:
            await self.capture_session.capture()
        except AttendanceError as exc:
            # A shot from a discarded session must not touch the current one.
            if token == self.generation:
                self.message = exc.message
            raise
        self.message = None
        self._transition(SessionState.CAPTURED)
        return self.view()

    def retake(self) -> SessionView:
        self._require(SessionState.CAPTURED)
        self.capture_session.retake()
        self.message = None
        self._transition(SessionState.ARMED)
        return self.view()

    def discard(self) -> SessionView:
        """Drop the photo and close the camera, abandoning any pending upload."""
        if self.state not in _DISCARDABLE:
            raise InvalidSessionState("There is nothing to discard.")
        self.capture_session.discard()
        self.generation += 1
        self.kind = None
        self.message = None
        self._transition(SessionState.IDLE)
        return self.view()

    def cancel(self) -> SessionView:
        return self.discard()

    async def confirm_upload(self) -> SessionView:
        """Upload the captured photo and reconcile the outcome."""
        self._ensure_no_upload()
        self._require(SessionState.CAPTURED)
        artifact = self.capture_session.artifact
        kind = self.kind
        if artifact is None or kind is None:
            raise InvalidSessionState("There is no photo to upload.")

        token = self.generation
        self._transition(SessionState.UPLOADING)
        try:
            outcome = await self.upload_service.submit(artifact, kind)
        except Exception:
            if token == self.generation:
                self._transition(SessionState.CAPTURED)
            raise

        if token != self.generation:
            logger.info("Ignoring stale upload response from generation %d", token)
            return self.view()

        result = self.reconciler.apply_outcome(kind, outcome)
        self.last_result = result
        self.message = result.message
        if result.succeeded:
            self.capture_session.release_artifact()
            self._transition(SessionState.RECONCILED)
        else:
            self._transition(SessionState.CAPTURED)
        return self.view()

    def acknowledge(self) -> SessionView:
        self._require(SessionState.RECONCILED)
        self.kind = None
        self.message = None
        self.last_result = None
        self._transition(SessionState.IDLE)
        return self.view()

    def toggle_manual(self, person_id: str) -> Person:
        """Flip a student's presence by hand, in any session state."""
        person = self.roster.get(person_id)
        return self.roster.set_present(person_id, not person.present)

    def start_attendance_round(self) -> None:
        self._ensure_no_upload()
        self.roster.reset_presence()
        logger.info("Started a new attendance round")

    def submit_attendance_round(self) -> AttendanceSummary:
        """Summarize the round; requires at least one marked student."""
        if not self.roster.has_marked_presence():
            raise NothingToSubmit
        people = self.roster.list_people()
        summary = AttendanceSummary(
            present_names=tuple(p.name for p in people if p.present),
            absent_names=tuple(p.name for p in people if not p.present),
        )
        logger.info(
            "Attendance submitted: %d present, %d absent",
            len(summary.present_names),
            len(summary.absent_names),
        )
        return summary

    def _ensure_no_upload(self) -> None:
        if self.upload_service.in_flight:
            raise JobInProgress

    def _require(self, expected: SessionState) -> None:
        if self.state is not expected:
            raise InvalidSessionState(
                f"Cannot do that while the session is {self.state.lower()}."
            )

    def _transition(self, new_state: SessionState) -> None:
        logger.info("Session %s -> %s", self.state, new_state)
        self.state = new_state


def render_view(
    *,
    state: SessionState,
    kind: JobKind | None,
    has_photo: bool,
    message: str | None,
    result: ReconciliationResult | None,
) -> SessionView:
    """Project session state into what a screen should show."""
    return SessionView(
        state=state,
        mode=str(kind.type) if kind else None,
        student_id=kind.person_id if kind else None,
        has_photo=has_photo,
        message=message,
        result=result,
    )
