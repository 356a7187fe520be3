"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    operator_token: str
    recognition_base_url: str = "https://your-api.com"
    attendance_endpoint: str = "/upload-photo"
    registration_endpoint: str = "/register-student"
    recognition_api_token: str | None = None
    upload_timeout_seconds: float = 30.0
    camera_index: int = 0
    roster_path: str | None = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def endpoint_url(self, path: str) -> str:
        """Join the recognition base URL with an endpoint path."""
        return f"{self.recognition_base_url.rstrip('/')}/{path.lstrip('/')}"
