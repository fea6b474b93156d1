"""
Per-table reporting for a finished seating.

Tables are graded A to F on the share of their occupants who got at least
one of their preferences.
"""
from __future__ import annotations

from typing import Dict, List

from .models import Assignment, Table
from .objectives import Companions, summarize


def compute_table_stats(table: Table, companions: Companions) -> Dict[str, int | float]:
    """Count satisfied people and preferences plus companion violations at one table."""
    satisfied_people = satisfied_prefs = total_prefs = violations = 0
    for person in table.occupants:
        hits = sum(1 for pref in person.preferences if pref in table.people_map)
        total_prefs += len(person.preferences)
        satisfied_prefs += hits
        if hits:
            satisfied_people += 1
        companion = companions.get(person.name)
        if companion is not None and companion not in table:
            violations += 1
    seated = len(table.occupants)
    return {
        "capacity": table.capacity,
        "satisfied_people": satisfied_people,
        "satisfied_share": satisfied_people / seated if seated else 0.0,
        "satisfied_preferences": satisfied_prefs,
        "total_preferences": total_prefs,
        "companion_violations": violations,
    }


def grade_tables(stats: List[Dict[str, int | float]]) -> List[Dict[str, int | float | str]]:
    """Assign A to F based on satisfied share thresholds."""
    graded = []
    for s in stats:
        m = s["satisfied_share"]
        if s["companion_violations"]:
            g = "F"
        elif m >= 0.9:
            g = "A"
        elif m >= 0.75:
            g = "B"
        elif m >= 0.5:
            g = "C"
        elif m >= 0.25:
            g = "D"
        else:
            g = "F"
        out = dict(s)
        out["grade"] = g
        graded.append(out)
    return graded


def table_report(assignment: Assignment, companions: Companions) -> List[Dict[str, int | float | str]]:
    stats = []
    for index, table in enumerate(assignment.tables):
        s = compute_table_stats(table, companions)
        s["table"] = index
        s["members"] = "|".join(p.name for p in table.occupants)
        stats.append(s)
    return grade_tables(stats)


def format_solution(assignment: Assignment, companions: Companions) -> str:
    """Render the headline numbers followed by every table and its members."""
    summary = summarize(assignment, companions)
    lines = [
        f"Found a solution where {summary.satisfied_people} people are given a preference "
        f"(i.e. {summary.unsatisfied_people} people have not been allocated at least one of their preferences). "
        f"{summary.satisfied_preferences} preferences are given in total",
        "",
    ]
    if summary.companion_violations:
        lines.extend([f"Warning: {summary.companion_violations} people are not seated with their companion", ""])
    for index, table in enumerate(assignment.tables):
        if index:
            lines.append("")
        lines.append(f"Table {index} (capacity {table.capacity})")
        lines.extend(f"- {p.name}" for p in table.occupants)
    return "\n".join(lines)
