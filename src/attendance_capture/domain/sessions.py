"""Domain models for the smart-capture session."""

from dataclasses import dataclass
from enum import StrEnum

from attendance_capture.domain.uploads import JobKind


class SessionState(StrEnum):
    """Phases of the capture-upload-reconcile flow."""

    IDLE = "IDLE"
    ARMING = "ARMING"
    ARMED = "ARMED"
    CAPTURED = "CAPTURED"
    UPLOADING = "UPLOADING"
    RECONCILED = "RECONCILED"


@dataclass(frozen=True)
class AttendanceSummary:
    """Present and absent names in roster order."""

    present_names: tuple[str, ...]
    absent_names: tuple[str, ...]


@dataclass(frozen=True)
class ReconciliationResult:
    """Result of applying an upload outcome to the roster."""

    kind: JobKind
    succeeded: bool
    message: str
    present_names: tuple[str, ...] = ()
    absent_names: tuple[str, ...] = ()
    registered_name: str | None = None


@dataclass(frozen=True)
class SessionView:
    """What the presentation layer needs to render the current session."""

    state: SessionState
    mode: str | None
    student_id: str | None
    has_photo: bool
    message: str | None
    result: ReconciliationResult | None
