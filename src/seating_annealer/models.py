"""Data models for SeatingAnnealer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Set
import math

import numpy as np

from .errors import InconsistentProblemError, InvalidParameterError


def parse_pipe_list(value: object) -> List[str]:
    """Split a pipe separated string into a list.

    Empty values such as ``""`` or ``None`` return an empty list.
    ``pandas`` often provides ``float('nan')`` for missing values which is
    also treated as empty.
    """
    if value is None:
        return []
    if isinstance(value, float) and math.isnan(value):
        return []
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return []
    return [part.strip() for part in text.split("|") if part.strip()]


@dataclass(frozen=True)
class Person:
    """Someone to be seated, with the names they would like to sit with."""

    name: str
    preferences: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompanionPair:
    """``person_one`` must be seated at the same table as ``person_two``."""

    person_one: str
    person_two: str


@dataclass
class Table:
    """A table whose every seat is filled.

    ``people_map`` holds the occupant names for constant time lookups and
    always mirrors ``occupants``.
    """

    capacity: int
    occupants: List[Person] = field(default_factory=list)
    people_map: Set[str] = field(default_factory=set)

    @classmethod
    def seated(cls, capacity: int, occupants: Sequence[Person]) -> "Table":
        occupants = list(occupants)
        if len(occupants) != capacity:
            raise InconsistentProblemError(
                f"Table of capacity {capacity} given {len(occupants)} occupants"
            )
        return cls(capacity=capacity, occupants=occupants, people_map={p.name for p in occupants})

    def __contains__(self, name: object) -> bool:
        return name in self.people_map

    def copy(self) -> "Table":
        # Person is frozen so a new list is enough to detach the slots.
        return Table(capacity=self.capacity, occupants=list(self.occupants), people_map=set(self.people_map))

    def replace(self, seat: int, person: Person) -> Person:
        """Seat ``person`` at ``seat`` and return whoever sat there."""
        previous = self.occupants[seat]
        self.occupants[seat] = person
        self.people_map.discard(previous.name)
        self.people_map.add(person.name)
        return previous


@dataclass
class Assignment:
    """An ordered list of tables partitioning every person exactly once."""

    tables: List[Table] = field(default_factory=list)

    @classmethod
    def random(cls, people: Sequence[Person], capacities: Sequence[int], rng: np.random.Generator) -> "Assignment":
        """Shuffle ``people`` uniformly and fill the tables in order."""
        check_capacities(capacities, len(people))
        order = rng.permutation(len(people))
        shuffled = [people[i] for i in order]
        tables: List[Table] = []
        pos = 0
        for capacity in capacities:
            tables.append(Table.seated(capacity, shuffled[pos:pos + capacity]))
            pos += capacity
        return cls(tables=tables)

    def clone(self) -> "Assignment":
        return Assignment(tables=[t.copy() for t in self.tables])

    def neighbor(self, swap_count: int, rng: np.random.Generator) -> "Assignment":
        """Return a copy with ``swap_count`` random swaps between distinct tables.

        Each swap exchanges one occupant of a random table with one occupant of
        a second, different table, so capacities never change. With fewer than
        two tables there is nothing to swap and an unchanged copy is returned.
        """
        out = self.clone()
        table_count = len(out.tables)
        if table_count < 2:
            return out
        for _ in range(swap_count):
            first = int(rng.integers(table_count))
            second = int(rng.integers(table_count - 1))
            if second >= first:
                second += 1
            table_one = out.tables[first]
            table_two = out.tables[second]
            seat_one = int(rng.integers(table_one.capacity))
            seat_two = int(rng.integers(table_two.capacity))
            moved = table_one.replace(seat_one, table_two.occupants[seat_two])
            table_two.replace(seat_two, moved)
        return out

    def people(self) -> Iterable[Person]:
        for table in self.tables:
            yield from table.occupants

    def people_count(self) -> int:
        return sum(len(t.occupants) for t in self.tables)

    def preference_count(self) -> int:
        return sum(len(p.preferences) for p in self.people())

    def table_of(self, name: str) -> int | None:
        """Index of the table seating ``name``, or ``None``."""
        for index, table in enumerate(self.tables):
            if name in table:
                return index
        return None

    def as_mapping(self) -> Dict[str, int]:
        """Map each person's name to the index of their table."""
        return {p.name: i for i, t in enumerate(self.tables) for p in t.occupants}


def check_capacities(capacities: Sequence[int], headcount: int) -> None:
    """Reject non positive capacities and a capacity sum that misses ``headcount``."""
    for index, capacity in enumerate(capacities):
        if capacity <= 0:
            raise InvalidParameterError(f"Table {index} has capacity {capacity}; capacities must be positive")
    total = sum(capacities)
    if total != headcount:
        raise InconsistentProblemError(
            f"Tables seat {total} people but {headcount} people were given"
        )


@dataclass
class Problem:
    """Parsed problem description: people, table capacities and companions."""

    people: List[Person]
    capacities: List[int]
    companions: List[CompanionPair] = field(default_factory=list)

    def validate(self) -> None:
        names = [p.name for p in self.people]
        seen: Set[str] = set()
        for name in names:
            if name in seen:
                raise InconsistentProblemError(f"Duplicate person name: {name}")
            seen.add(name)
        check_capacities(self.capacities, len(self.people))
        for pair in self.companions:
            for name in (pair.person_one, pair.person_two):
                if name not in seen:
                    raise InconsistentProblemError(f"Unknown person referenced by companion pair: {name}")

    def companion_map(self) -> Dict[str, str]:
        return {pair.person_one: pair.person_two for pair in self.companions}
