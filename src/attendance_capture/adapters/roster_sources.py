"""Roster sources used to build the store at session start."""

import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, TypeAdapter

from attendance_capture.domain.roster import Person
from attendance_capture.services.roster import RosterSource


class RosterEntry(BaseModel):
    """One student row from a roster file."""

    id: str
    name: str
    registered: bool = False


DEMO_STUDENTS: tuple[RosterEntry, ...] = (
    RosterEntry(id="S001", name="John Doe", registered=True),
    RosterEntry(id="S002", name="Jane Smith", registered=False),
    RosterEntry(id="S003", name="Alice Johnson", registered=True),
    RosterEntry(id="S004", name="Bob Williams", registered=False),
)

_ENTRIES = TypeAdapter(list[RosterEntry])


def _to_people(entries: Sequence[RosterEntry]) -> list[Person]:
    return [
        Person(id=entry.id, name=entry.name, registered=entry.registered)
        for entry in entries
    ]


@dataclass
class StaticRosterSource(RosterSource):
    """Roster held in code; defaults to the demo class."""

    entries: tuple[RosterEntry, ...] = DEMO_STUDENTS

    def load(self) -> list[Person]:
        return _to_people(self.entries)


@dataclass
class JsonFileRosterSource(RosterSource):
    """Roster read from a JSON list or a ``{"students": [...]}`` object."""

    path: Path

    def load(self) -> list[Person]:
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("students", [])
        return _to_people(_ENTRIES.validate_python(raw))
