"""
Objective functions scoring an assignment, higher is better.

sum:    one point per satisfied (person, preference) pair. Mutual preferences
        count twice.
count:  one point per person with at least one satisfied preference.
hybrid: count * M + sum with M = max(people, preferences), so a better count
        always beats any change in sum.

Any companion violation overrides sum and count with minus the number of
violations, so a violating seating is always worse than a valid one.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Tuple

from .errors import UnknownObjectiveError
from .models import Assignment

Companions = Mapping[str, str]


def _tally(assignment: Assignment, companions: Companions) -> Tuple[int, int, int]:
    """Return ``(violations, satisfied preferences, satisfied people)``."""
    violations = satisfied_prefs = satisfied_people = 0
    for table in assignment.tables:
        for person in table.occupants:
            companion = companions.get(person.name)
            if companion is not None and companion not in table.people_map:
                violations += 1
            hits = sum(1 for pref in person.preferences if pref in table.people_map)
            satisfied_prefs += hits
            if hits:
                satisfied_people += 1
    return violations, satisfied_prefs, satisfied_people


def companion_violations(assignment: Assignment, companions: Companions) -> int:
    """Number of people seated away from their declared companion."""
    return _tally(assignment, companions)[0]


def sum_score(assignment: Assignment, companions: Companions) -> float:
    violations, satisfied_prefs, _ = _tally(assignment, companions)
    if violations:
        return float(-violations)
    return float(satisfied_prefs)


def count_score(assignment: Assignment, companions: Companions) -> float:
    violations, _, satisfied_people = _tally(assignment, companions)
    if violations:
        return float(-violations)
    return float(satisfied_people)


def hybrid_score(assignment: Assignment, companions: Companions) -> float:
    """Count first, then sum, folded into a single scalar."""
    violations, satisfied_prefs, satisfied_people = _tally(assignment, companions)
    weight = max(assignment.people_count(), assignment.preference_count())
    if violations:
        satisfied_prefs = satisfied_people = -violations
    return float(satisfied_people * weight + satisfied_prefs)


class ObjectiveKind(str, Enum):
    """Objective selected once per run."""

    SUM = "sum"
    COUNT = "count"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value: "str | ObjectiveKind") -> "ObjectiveKind":
        if isinstance(value, ObjectiveKind):
            return value
        text = str(value).strip().lower()
        for kind in cls:
            if kind.value == text:
                return kind
        choices = ", ".join(k.value for k in cls)
        raise UnknownObjectiveError(f"Unknown objective function {value!r}; expected one of: {choices}")

    def evaluate(self, assignment: Assignment, companions: Companions) -> float:
        if self is ObjectiveKind.SUM:
            return sum_score(assignment, companions)
        if self is ObjectiveKind.COUNT:
            return count_score(assignment, companions)
        return hybrid_score(assignment, companions)


@dataclass(frozen=True)
class SeatingSummary:
    """Headline numbers for a finished seating.

    ``satisfied_people`` and ``satisfied_preferences`` are the objective
    values, so they turn negative when a companion pair is split. The
    ``people_with_preference`` and ``preferences_met`` tallies ignore
    companions and are always counts.
    """

    satisfied_people: int
    unsatisfied_people: int
    satisfied_preferences: int
    companion_violations: int
    people_with_preference: int = 0
    preferences_met: int = 0


def summarize(assignment: Assignment, companions: Companions) -> SeatingSummary:
    violations, preferences_met, people_with_preference = _tally(assignment, companions)
    satisfied_people = -violations if violations else people_with_preference
    return SeatingSummary(
        satisfied_people=satisfied_people,
        unsatisfied_people=assignment.people_count() - satisfied_people,
        satisfied_preferences=-violations if violations else preferences_met,
        companion_violations=violations,
        people_with_preference=people_with_preference,
        preferences_met=preferences_met,
    )
