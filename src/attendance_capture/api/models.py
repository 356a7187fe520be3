"""Pydantic models for session API requests."""

from typing import Literal

from pydantic import BaseModel, model_validator


class StartCaptureRequest(BaseModel):
    """Body for starting a smart capture."""

    mode: Literal["attendance", "registration"] = "attendance"
    student_id: str | None = None

    @model_validator(mode="after")
    def _registration_needs_student(self) -> "StartCaptureRequest":
        if self.mode == "registration" and not self.student_id:
            raise ValueError("student_id is required for registration")
        return self
