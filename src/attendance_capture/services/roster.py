"""In-memory roster store with presence and registration flags."""

from dataclasses import dataclass, field, replace
from typing import Protocol

from attendance_capture.domain.roster import Person
from attendance_capture.errors import NotFound


class RosterSource(Protocol):
    """Interface for loading the roster at session start."""

    def load(self) -> list[Person]:
        """Return the people eligible for this session."""


@dataclass
class RosterStore:
    """Holds the roster for one session; only the two flags ever change."""

    _people: dict[str, Person] = field(default_factory=dict)
    _marked: set[str] = field(default_factory=set)

    @classmethod
    def from_people(cls, people: list[Person]) -> "RosterStore":
        """Build a store, rejecting duplicate ids."""
        store = cls()
        for person in people:
            if person.id in store._people:
                raise ValueError(f"Duplicate roster id: {person.id}")
            store._people[person.id] = person
        return store

    @classmethod
    def from_source(cls, source: RosterSource) -> "RosterStore":
        return cls.from_people(source.load())

    def list_people(self) -> tuple[Person, ...]:
        """Return a snapshot of the roster in load order."""
        return tuple(self._people.values())

    def get(self, person_id: str) -> Person:
        person = self._people.get(person_id)
        if person is None:
            raise NotFound(f"Student {person_id} not found.")
        return person

    def set_present(self, person_id: str, value: bool) -> Person:
        """Set the presence flag and return the updated entry."""
        person = self.get(person_id)
        self._marked.add(person_id)
        if person.present != value:
            person = replace(person, present=value)
            self._people[person_id] = person
        return person

    def set_registered(self, person_id: str, value: bool) -> None:
        person = self.get(person_id)
        if person.registered != value:
            self._people[person_id] = replace(person, registered=value)

    def reset_presence(self) -> None:
        """Mark everyone absent and forget which entries were marked."""
        self._marked.clear()
        for person_id, person in self._people.items():
            if person.present:
                self._people[person_id] = replace(person, present=False)

    def has_marked_presence(self) -> bool:
        return bool(self._marked)
