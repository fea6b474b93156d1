"""Loader for the JSON problem format.

Example::

    {
      "people": [{"name": "A", "preferences": ["B"]}, ...],
      "tables": [2, 2],
      "plusOnes": [{"personOne": "A", "personTwo": "B"}]
    }

``plusOnes`` may be omitted.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from .errors import InconsistentProblemError
from .models import CompanionPair, Person, Problem


def problem_from_dict(data: Mapping[str, Any]) -> Problem:
    try:
        people = [
            Person(name=str(p["name"]), preferences=tuple(str(x) for x in p.get("preferences") or []))
            for p in data["people"]
        ]
        capacities = [int(c) for c in data["tables"]]
        companions = [
            CompanionPair(person_one=str(c["personOne"]), person_two=str(c["personTwo"]))
            for c in data.get("plusOnes") or []
        ]
    except (KeyError, TypeError) as exc:
        raise InconsistentProblemError(f"Malformed problem description: {exc}") from exc
    return Problem(people=people, capacities=capacities, companions=companions)


def load_problem(path: Path | str) -> Problem:
    """Read and parse a problem file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise InconsistentProblemError(f"Could not parse {path}: {exc}") from exc
    return problem_from_dict(data)
