"""Error taxonomy for the capture-upload-reconcile workflow."""


class AttendanceError(Exception):
    """Base exception for recoverable workflow failures."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DeviceUnavailable(AttendanceError):
    """Raised when no capture device is present on the host."""

    default_message = "No camera available."


class PermissionDenied(AttendanceError):
    """Raised when camera permission was not granted before arming."""

    default_message = "Camera access is required. Please enable it in settings."


class CaptureFailed(AttendanceError):
    """Raised when the device fails to take a photo."""

    default_message = "Failed to capture image."


class JobInProgress(AttendanceError):
    """Raised when an upload is already in flight."""

    default_message = "An upload is already in progress."


class NotFound(AttendanceError):
    """Raised when a roster id is unknown."""

    default_message = "Student not found."


class NothingToSubmit(AttendanceError):
    """Raised when an attendance round has no marked presence."""

    default_message = "Please mark attendance before submitting."


class InvalidSessionState(AttendanceError):
    """Raised when an operation is not valid in the current state."""

    default_message = "That action is not available right now."


class ArtifactReleased(AttendanceError):
    """Raised when reading a photo artifact that was already released."""

    default_message = "The captured photo is no longer available."


class UploadTransportError(AttendanceError):
    """Raised by network clients when no response was received."""

    default_message = "Network error, please try again later."
