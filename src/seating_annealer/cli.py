"""Command line interface for SeatingAnnealer."""
from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Sequence

from .annealer import anneal
from .config import AnnealConfig
from .csv_loader import load_all
from .json_loader import load_problem
from .objectives import ObjectiveKind
from .report import format_solution, table_report


def build_parser() -> argparse.ArgumentParser:
    defaults = AnnealConfig()
    parser = argparse.ArgumentParser(description="Seat people at tables by replica exchange annealing")
    parser.add_argument("-m", "--method", default=defaults.objective.value,
                        help="Objective: 'sum' maximises satisfied preferences, 'count' maximises people "
                             "with at least one, 'hybrid' prioritises count then sum.")
    parser.add_argument("-f", "--file", type=Path,
                        help="Path to a JSON problem file (people, tables, plusOnes).")
    parser.add_argument("--people", type=Path, help="Path to people.csv (name, preferences).")
    parser.add_argument("--tables", type=Path, help="Path to tables.csv (capacity).")
    parser.add_argument("--companions", type=Path, help="Path to companions.csv (person_one, person_two).")
    parser.add_argument("-b", "--base-temperature", type=float, default=defaults.base_temperature,
                        help="Temperature of the coldest annealer; annealer i runs at base * 2^i.")
    parser.add_argument("-e", "--final-temperature", type=float, default=defaults.final_temperature,
                        help="Stop once the base temperature falls to this value.")
    parser.add_argument("-c", "--cooling-rate", type=float, default=defaults.cooling_rate,
                        help="Factor applied to the base temperature each round, between 0 and 1.")
    parser.add_argument("-i", "--iterations", type=int, default=defaults.internal_iterations,
                        help="Metropolis steps per annealer per round.")
    parser.add_argument("-s", "--swaps", type=int, default=defaults.swap_count,
                        help="Swaps applied when generating each neighbour.")
    parser.add_argument("-a", "--annealers", type=int, default=defaults.ladder_size,
                        help="Number of concurrent annealers in the temperature ladder.")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible run.")
    parser.add_argument("--processes", action="store_true",
                        help="Run the annealers in worker processes instead of threads.")
    parser.add_argument("--out-assignments", type=Path,
                        help="Write assignments CSV: person,table.")
    parser.add_argument("--out-report", type=Path,
                        help="Write per-table report CSV with counts and grades.")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-vv for every round).")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point used by ``python -m seating_annealer``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.file is None and (args.people is None or args.tables is None):
        parser.error("either --file or both --people and --tables are required")

    try:
        if args.file is not None:
            problem = load_problem(args.file)
        else:
            problem = load_all(args.people, args.tables, args.companions)
        config = AnnealConfig(
            objective=ObjectiveKind.parse(args.method),
            base_temperature=args.base_temperature,
            final_temperature=args.final_temperature,
            cooling_rate=args.cooling_rate,
            internal_iterations=args.iterations,
            swap_count=args.swaps,
            ladder_size=args.annealers,
            seed=args.seed,
            executor="process" if args.processes else "thread",
        )
        result = anneal(problem, config)
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1)

    companions = problem.companion_map()
    print(format_solution(result.assignment, companions))

    if args.out_assignments:
        args.out_assignments.parent.mkdir(parents=True, exist_ok=True)
        with args.out_assignments.open("w", newline="") as f:
            w = csv.writer(f)
            w.writerow(["person", "table"])
            for index, table in enumerate(result.assignment.tables):
                for person in table.occupants:
                    w.writerow([person.name, index])

    graded = table_report(result.assignment, companions)

    # Print a compact table summary
    print()
    for s in graded:
        print(f"[REPORT] table {s['table']} grade={s['grade']} satisfied={s['satisfied_people']}/{s['capacity']} "
              f"prefs={s['satisfied_preferences']}/{s['total_preferences']} violations={s['companion_violations']}")

    if args.out_report:
        args.out_report.parent.mkdir(parents=True, exist_ok=True)
        with args.out_report.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=[
                "table", "grade", "capacity", "satisfied_people", "satisfied_share",
                "satisfied_preferences", "total_preferences", "companion_violations", "members",
            ])
            w.writeheader()
            for s in graded:
                row = dict(s)
                row["satisfied_share"] = f"{s['satisfied_share']:.4f}"
                w.writerow(row)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
