"""Annealing parameters."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Optional

from .errors import InvalidParameterError
from .objectives import ObjectiveKind

# Hottest chain runs at base * 2**(ladder_size - 1); keep that a finite float.
MAX_LADDER_SIZE = 64
EXECUTORS = ("thread", "process")


@dataclass
class AnnealConfig:
    """Parameters of one replica exchange run.

    ``base_temperature`` is the temperature of the coldest chain; chain ``i``
    runs at ``base_temperature * 2**i``. Every round the base temperature is
    multiplied by ``cooling_rate`` until it drops to ``final_temperature``.

    ``executor`` picks where chains run each round. Chains are pure Python, so
    ``"thread"`` runs them one at a time under the GIL; ``"process"`` spreads
    them over worker processes. Both give the same result for the same seed.
    """

    objective: ObjectiveKind = ObjectiveKind.HYBRID
    base_temperature: float = 1.0
    final_temperature: float = 0.00001
    cooling_rate: float = 0.9
    internal_iterations: int = 1000
    swap_count: int = 1
    ladder_size: int = 6
    seed: Optional[int] = None
    executor: str = "thread"

    def __post_init__(self) -> None:
        self.objective = ObjectiveKind.parse(self.objective)

    def validate(self) -> None:
        """Reject values that would never finish or divide by zero."""
        for name in ("base_temperature", "final_temperature"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise InvalidParameterError(f"{name} must be a finite positive number, got {value}")
        if not 0 < self.cooling_rate < 1:
            raise InvalidParameterError(f"cooling_rate must lie strictly between 0 and 1, got {self.cooling_rate}")
        if self.internal_iterations < 1:
            raise InvalidParameterError(f"internal_iterations must be at least 1, got {self.internal_iterations}")
        if self.swap_count < 1:
            raise InvalidParameterError(f"swap_count must be at least 1, got {self.swap_count}")
        if not 1 <= self.ladder_size <= MAX_LADDER_SIZE:
            raise InvalidParameterError(
                f"ladder_size must be between 1 and {MAX_LADDER_SIZE}, got {self.ladder_size}"
            )
        if self.executor not in EXECUTORS:
            raise InvalidParameterError(f"executor must be one of {', '.join(EXECUTORS)}, got {self.executor!r}")
