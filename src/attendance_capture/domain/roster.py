"""Domain models for the attendance roster."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Person:
    """Represents a student on the roster."""

    id: str
    name: str
    present: bool = False
    registered: bool = False
