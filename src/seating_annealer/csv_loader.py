"""CSV loading utilities."""
from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Iterable, List

import pandas as pd

from .models import CompanionPair, Person, Problem, parse_pipe_list


def load_people(path: Path | str | IO[Any]) -> List[Person]:
    """Load people from ``people.csv``.

    Columns: ``name`` and an optional pipe separated ``preferences``.
    Preferences are not checked against known names.
    """
    df = pd.read_csv(path)
    people: List[Person] = []
    for _, row in df.iterrows():
        people.append(
            Person(
                name=str(row["name"]).strip(),
                preferences=tuple(parse_pipe_list(row.get("preferences", ""))),
            )
        )
    return people


def load_tables(path: Path | str | IO[Any]) -> List[int]:
    """Load table capacities from ``tables.csv``."""
    df = pd.read_csv(path)
    return [int(row["capacity"]) for _, row in df.iterrows()]


def load_companions(path: Path | str | IO[Any], names: Iterable[str] | None = None) -> List[CompanionPair]:
    """Load companion pairs.

    If ``names`` is provided it validates that both people exist.
    """
    df = pd.read_csv(path)
    known = set(names) if names is not None else None
    pairs: List[CompanionPair] = []
    for _, row in df.iterrows():
        a = str(row["person_one"]).strip()
        b = str(row["person_two"]).strip()
        if known is not None and (a not in known or b not in known):
            raise ValueError(f"Companion pair references unknown person: {a}, {b}")
        pairs.append(CompanionPair(person_one=a, person_two=b))
    return pairs


def load_all(
    people_path: Path | str,
    tables_path: Path | str,
    companions_path: Path | str | None = None,
) -> Problem:
    """Convenience wrapper returning a :class:`Problem`."""
    people = load_people(people_path)
    capacities = load_tables(tables_path)
    companions: List[CompanionPair] = []
    if companions_path is not None:
        companions = load_companions(companions_path, {p.name for p in people})
    return Problem(people=people, capacities=capacities, companions=companions)
