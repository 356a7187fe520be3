"""Domain models for captured photos."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from attendance_capture.errors import ArtifactReleased


class CaptureState(StrEnum):
    """Lifecycle of a single photo acquisition."""

    INACTIVE = "INACTIVE"
    ARMED = "ARMED"
    CAPTURED = "CAPTURED"


@dataclass(eq=False)
class PhotoArtifact:
    """A captured photo that owns its image bytes until released."""

    local_ref: str
    captured_at: datetime
    data: bytearray | None = field(default=None, repr=False)

    @classmethod
    def from_bytes(cls, image_bytes: bytes) -> "PhotoArtifact":
        """Wrap freshly captured bytes in a new artifact."""
        return cls(
            local_ref=str(uuid4()),
            captured_at=datetime.now(tz=UTC),
            data=bytearray(image_bytes),
        )

    @property
    def released(self) -> bool:
        return self.data is None

    def read(self) -> bytes:
        """Return a copy of the image bytes."""
        if self.data is None:
            raise ArtifactReleased
        return bytes(self.data)

    def release(self) -> None:
        """Zero and drop the image buffer. Safe to call twice."""
        if self.data is None:
            return
        self.data[:] = bytes(len(self.data))
        self.data = None
