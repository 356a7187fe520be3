"""Bearer token supply for the recognition service."""

from dataclasses import dataclass
from typing import Protocol


class TokenProvider(Protocol):
    """Read-only source of the current bearer token."""

    def get_token(self) -> str | None:
        """Return the bearer token, or None when unauthenticated."""


@dataclass(frozen=True)
class StaticTokenProvider(TokenProvider):
    """Token provider backed by a configured value."""

    token: str | None = None

    def get_token(self) -> str | None:
        return self.token or None
