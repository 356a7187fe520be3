"""ASGI entrypoint for the attendance capture API."""

from attendance_capture.api.app import create_app
from attendance_capture.containers import build_container

app = create_app(build_container())
