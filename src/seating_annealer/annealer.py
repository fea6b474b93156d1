"""
Simulated annealing with replica exchange.

A ladder of chains runs at temperatures ``base * 2**i``. Each round every
chain performs ``internal_iterations`` Metropolis steps concurrently, then one
sweep from the hottest to the coldest chain swaps adjacent solutions whenever
the hotter one scores better. The base temperature decays geometrically and
the coldest chain's seating is returned once it falls to the final
temperature.
"""
from __future__ import annotations

from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import AnnealConfig
from .models import Assignment, Problem
from .objectives import Companions, ObjectiveKind

logger = logging.getLogger(__name__)


@dataclass
class ChainState:
    """One rung of the ladder. Owned by a single task at a time."""

    assignment: Assignment
    score: float
    temperature: float = 0.0


@dataclass
class AnnealResult:
    assignment: Assignment
    score: float
    initial_score: float
    rounds: int
    history: List[float] = field(default_factory=list)


def level_temperature(base_temperature: float, level: int) -> float:
    return base_temperature * 2.0 ** level


def acceptance_probability(current_score: float, candidate_score: float, temperature: float) -> float:
    """Metropolis probability of moving from ``current_score`` to ``candidate_score``."""
    return math.exp((candidate_score - current_score) / temperature)


def run_chain(
    assignment: Assignment,
    score: float,
    temperature: float,
    objective: ObjectiveKind,
    companions: Companions,
    internal_iterations: int,
    swap_count: int,
    rng: np.random.Generator,
) -> ChainState:
    """Run ``internal_iterations`` Metropolis steps at a fixed temperature.

    Better neighbours are always taken; others are taken when a uniform draw
    falls below the acceptance probability. Touches nothing but its arguments,
    so separate calls may run concurrently as long as each has its own ``rng``.
    """
    current = assignment.clone()
    current_score = score
    for _ in range(internal_iterations):
        candidate = current.neighbor(swap_count, rng)
        candidate_score = objective.evaluate(candidate, companions)
        if candidate_score > current_score:
            current, current_score = candidate, candidate_score
        elif rng.random() < acceptance_probability(current_score, candidate_score, temperature):
            current, current_score = candidate, candidate_score
    return ChainState(assignment=current, score=current_score, temperature=temperature)


def exchange_pass(states: List[ChainState]) -> int:
    """Single sweep from hottest to coldest swapping better hotter solutions down.

    Only adjacent rungs are compared, once each, so the ladder is not fully
    sorted afterwards. Temperatures stay with their rung. Returns the number
    of swaps made.
    """
    swaps = 0
    for i in range(len(states) - 1, 0, -1):
        hotter, colder = states[i], states[i - 1]
        if hotter.score > colder.score:
            hotter.assignment, colder.assignment = colder.assignment, hotter.assignment
            hotter.score, colder.score = colder.score, hotter.score
            swaps += 1
    return swaps


def _run_level(
    state: ChainState,
    rng: np.random.Generator,
    objective: ObjectiveKind,
    companions: Companions,
    internal_iterations: int,
    swap_count: int,
) -> Tuple[ChainState, np.random.Generator]:
    """One round of one level. Hands the advanced generator back to the caller.

    Process workers advance a pickled copy of ``rng``, so the level's stream
    only carries on into the next round through the returned generator.
    """
    state = run_chain(
        state.assignment, state.score, state.temperature, objective, companions,
        internal_iterations, swap_count, rng,
    )
    return state, rng


class ReplicaExchangeAnnealer:
    """Coordinates the temperature ladder for one problem."""

    def __init__(self, problem: Problem, config: Optional[AnnealConfig] = None) -> None:
        self.problem = problem
        self.config = config or AnnealConfig()
        # Fail before any work is done.
        self.problem.validate()
        self.config.validate()
        self.companions = problem.companion_map()

    def _spawn_generators(self) -> Sequence[np.random.Generator]:
        """One stream for the initial seating and one per ladder level."""
        seeds = np.random.SeedSequence(self.config.seed).spawn(self.config.ladder_size + 1)
        return [np.random.default_rng(s) for s in seeds]

    def _make_executor(self) -> Executor:
        if self.config.executor == "process":
            return ProcessPoolExecutor(max_workers=self.config.ladder_size)
        # Threads keep the round barrier but share the GIL, so chains take turns.
        return ThreadPoolExecutor(max_workers=self.config.ladder_size)

    def run(self) -> AnnealResult:
        cfg = self.config
        init_rng, *level_rngs = self._spawn_generators()

        initial = Assignment.random(self.problem.people, self.problem.capacities, init_rng)
        initial_score = cfg.objective.evaluate(initial, self.companions)
        ladder = [ChainState(initial.clone(), initial_score) for _ in range(cfg.ladder_size)]

        logger.info(
            "Annealing %d people over %d tables: objective=%s ladder=%d base=%g final=%g rate=%g iterations=%d "
            "executor=%s",
            len(self.problem.people), len(self.problem.capacities), cfg.objective.value,
            cfg.ladder_size, cfg.base_temperature, cfg.final_temperature, cfg.cooling_rate,
            cfg.internal_iterations, cfg.executor,
        )

        base_temperature = cfg.base_temperature
        history: List[float] = []
        rounds = 0
        with self._make_executor() as executor:
            while base_temperature > cfg.final_temperature:
                for level, state in enumerate(ladder):
                    state.temperature = level_temperature(base_temperature, level)
                futures = [
                    executor.submit(
                        _run_level, state, rng, cfg.objective, self.companions,
                        cfg.internal_iterations, cfg.swap_count,
                    )
                    for state, rng in zip(ladder, level_rngs)
                ]
                # Every level finishes before the exchange.
                outcomes = [f.result() for f in futures]
                ladder = [state for state, _ in outcomes]
                level_rngs = [rng for _, rng in outcomes]
                swaps = exchange_pass(ladder)
                history.append(ladder[0].score)
                rounds += 1
                logger.debug(
                    "round %d base=%.6g coldest=%g swaps=%d", rounds, base_temperature, ladder[0].score, swaps
                )
                base_temperature *= cfg.cooling_rate

        logger.info("Finished after %d rounds with score %g (started at %g)", rounds, ladder[0].score, initial_score)
        return AnnealResult(
            assignment=ladder[0].assignment,
            score=ladder[0].score,
            initial_score=initial_score,
            rounds=rounds,
            history=history,
        )


def anneal(problem: Problem, config: Optional[AnnealConfig] = None) -> AnnealResult:
    """Validate ``problem`` and ``config`` and run the replica exchange search."""
    return ReplicaExchangeAnnealer(problem, config).run()
