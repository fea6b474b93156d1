"""SeatingAnnealer package."""
from .models import Person, CompanionPair, Table, Assignment, Problem
from .objectives import ObjectiveKind, SeatingSummary, summarize
from .config import AnnealConfig
from .annealer import AnnealResult, ReplicaExchangeAnnealer, anneal
from .csv_loader import (
    load_people,
    load_tables,
    load_companions,
    load_all,
)
from .json_loader import load_problem

__all__ = [
    "Person",
    "CompanionPair",
    "Table",
    "Assignment",
    "Problem",
    "ObjectiveKind",
    "SeatingSummary",
    "summarize",
    "AnnealConfig",
    "AnnealResult",
    "ReplicaExchangeAnnealer",
    "anneal",
    "load_people",
    "load_tables",
    "load_companions",
    "load_all",
    "load_problem",
]
