"""Domain models for upload jobs and their outcomes."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class JobType(StrEnum):
    """Kinds of upload the recognition service accepts."""

    ATTENDANCE = "attendance"
    REGISTRATION = "registration"


@dataclass(frozen=True)
class JobKind:
    """Upload job kind; registration jobs carry the student id."""

    type: JobType
    person_id: str | None = None

    @classmethod
    def attendance(cls) -> "JobKind":
        return cls(type=JobType.ATTENDANCE)

    @classmethod
    def registration(cls, person_id: str) -> "JobKind":
        return cls(type=JobType.REGISTRATION, person_id=person_id)

    @property
    def is_attendance(self) -> bool:
        return self.type is JobType.ATTENDANCE


class AttendanceRecognition(BaseModel):
    """Success payload of the attendance-recognition endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    present_ids: list[str] = Field(alias="presentStudents")


class RegistrationConfirmation(BaseModel):
    """Success payload of the registration endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    student_id: str | None = Field(default=None, alias="studentId")
    name: str | None = None


@dataclass(frozen=True)
class UploadSuccess:
    """The service accepted the photo and returned a parsed payload."""

    payload: AttendanceRecognition | RegistrationConfirmation


@dataclass(frozen=True)
class RemoteRejected:
    """The service answered but refused the upload."""

    message: str


@dataclass(frozen=True)
class NetworkFailure:
    """No usable response was received."""

    detail: str | None = None


UploadOutcome = UploadSuccess | RemoteRejected | NetworkFailure
