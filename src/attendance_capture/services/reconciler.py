"""Apply upload outcomes to the roster."""

import logging
from dataclasses import dataclass

from attendance_capture.domain.sessions import ReconciliationResult
from attendance_capture.domain.uploads import (
    AttendanceRecognition,
    JobKind,
    NetworkFailure,
    RegistrationConfirmation,
    RemoteRejected,
    UploadOutcome,
    UploadSuccess,
)
from attendance_capture.services.roster import RosterStore

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error, please try again later."


@dataclass
class Reconciler:
    """Turns an upload outcome into roster mutations and a result to show."""

    roster: RosterStore

    def apply_outcome(
        self, kind: JobKind, outcome: UploadOutcome
    ) -> ReconciliationResult:
        """Mutate the roster for successes; report failures untouched."""
        if isinstance(outcome, NetworkFailure):
            return ReconciliationResult(
                kind=kind, succeeded=False, message=NETWORK_ERROR_MESSAGE
            )
        if isinstance(outcome, RemoteRejected):
            return ReconciliationResult(
                kind=kind, succeeded=False, message=outcome.message
            )
        if not isinstance(outcome, UploadSuccess):
            raise TypeError(f"Unknown upload outcome: {outcome!r}")

        if kind.is_attendance:
            if not isinstance(outcome.payload, AttendanceRecognition):
                raise TypeError("Attendance job received a registration payload")
            return self._apply_attendance(kind, set(outcome.payload.present_ids))
        if not isinstance(outcome.payload, RegistrationConfirmation):
            raise TypeError("Registration job received an attendance payload")
        return self._apply_registration(kind, outcome.payload)

    def _apply_attendance(
        self, kind: JobKind, present_ids: set[str]
    ) -> ReconciliationResult:
        present: list[str] = []
        absent: list[str] = []
        for person in self.roster.list_people():
            is_present = person.id in present_ids
            self.roster.set_present(person.id, is_present)
            (present if is_present else absent).append(person.name)

        unknown = present_ids - {person.id for person in self.roster.list_people()}
        if unknown:
            logger.warning("Ignoring unknown ids from recognition: %s", sorted(unknown))
        logger.info(
            "Attendance reconciled: %d present, %d absent", len(present), len(absent)
        )
        return ReconciliationResult(
            kind=kind,
            succeeded=True,
            message="Attendance updated successfully!",
            present_names=tuple(present),
            absent_names=tuple(absent),
        )

    def _apply_registration(
        self, kind: JobKind, confirmation: RegistrationConfirmation
    ) -> ReconciliationResult:
        person_id = kind.person_id or ""
        person = self.roster.get(person_id)
        self.roster.set_registered(person_id, True)
        logger.info("Student %s registered", person_id)
        name = confirmation.name or person.name
        return ReconciliationResult(
            kind=kind,
            succeeded=True,
            message=f"Student {name} registered successfully!",
            registered_name=name,
        )
