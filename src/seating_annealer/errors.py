"""Exceptions raised before any annealing work starts."""
from __future__ import annotations


class SeatingError(ValueError):
    """Base class for invalid problems and configurations."""


class InconsistentProblemError(SeatingError):
    """The people and tables cannot form a complete seating."""


class UnknownObjectiveError(SeatingError):
    """An objective selector that is not sum, count or hybrid."""


class InvalidParameterError(SeatingError):
    """A numeric parameter that would stall or break the schedule."""
