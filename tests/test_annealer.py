"""Tests for the chain iterator and the replica exchange coordinator."""
import math

import numpy as np
import pytest

from seating_annealer.annealer import (
    ChainState,
    ReplicaExchangeAnnealer,
    acceptance_probability,
    anneal,
    exchange_pass,
    level_temperature,
    run_chain,
)
from seating_annealer.config import MAX_LADDER_SIZE, AnnealConfig
from seating_annealer.errors import (
    InconsistentProblemError,
    InvalidParameterError,
    UnknownObjectiveError,
)
from seating_annealer.models import Assignment, CompanionPair, Person, Problem, Table
from seating_annealer.objectives import ObjectiveKind, companion_violations, sum_score

FAST = dict(base_temperature=1.0, final_temperature=0.01, cooling_rate=0.5, internal_iterations=50, ladder_size=3)


def four_people():
    return [
        Person("A", ("B",)),
        Person("B", ("A",)),
        Person("C", ("D",)),
        Person("D", ()),
    ]


def assert_partition(assignment, problem):
    names = sorted(p.name for p in assignment.people())
    assert names == sorted(p.name for p in problem.people)
    for table, capacity in zip(assignment.tables, problem.capacities):
        assert len(table.occupants) == capacity
        assert table.people_map == {p.name for p in table.occupants}


def test_level_temperature_doubles():
    assert [level_temperature(0.5, i) for i in range(4)] == [0.5, 1.0, 2.0, 4.0]


def test_acceptance_probability():
    assert acceptance_probability(3.0, 3.0, 0.1) == 1.0
    assert acceptance_probability(3.0, 2.0, 1.0) == pytest.approx(np.exp(-1.0))
    assert acceptance_probability(3.0, 2.0, 1e-6) == pytest.approx(0.0)


def test_run_chain_does_not_touch_its_input():
    people = four_people()
    start = Assignment(tables=[Table.seated(2, people[::2]), Table.seated(2, people[1::2])])
    snapshot = start.as_mapping()
    state = run_chain(start, 0.0, 1.0, ObjectiveKind.SUM, {}, 20, 1, np.random.default_rng(0))
    assert start.as_mapping() == snapshot
    assert state.temperature == 1.0
    assert state.score == sum_score(state.assignment, {})


def test_cold_chain_climbs_to_optimum():
    people = four_people()
    start = Assignment(tables=[Table.seated(2, people[::2]), Table.seated(2, people[1::2])])
    state = run_chain(start, 0.0, 1e-9, ObjectiveKind.SUM, {}, 200, 1, np.random.default_rng(4))
    assert state.score == 3
    assert state.assignment.table_of("A") == state.assignment.table_of("B")


def test_exchange_pass_is_a_single_sweep():
    states = [ChainState(Assignment(), s, t) for s, t in zip([1.0, 3.0, 2.0, 5.0], [1, 2, 4, 8])]
    labels = {id(s.assignment): s.score for s in states}
    swaps = exchange_pass(states)
    assert [s.score for s in states] == [5.0, 1.0, 3.0, 2.0]
    assert swaps == 3
    # Temperatures stay with their rung, assignments travel with their score.
    assert [s.temperature for s in states] == [1, 2, 4, 8]
    assert all(labels[id(s.assignment)] == s.score for s in states)


def test_exchange_pass_leaves_ordered_ladder():
    states = [ChainState(Assignment(), s) for s in [4.0, 3.0, 3.0, 1.0]]
    assert exchange_pass(states) == 0
    assert [s.score for s in states] == [4.0, 3.0, 3.0, 1.0]


def test_reaches_best_seating_for_small_problem():
    problem = Problem(four_people(), [2, 2])
    hits = 0
    for seed in range(5):
        result = anneal(problem, AnnealConfig(objective=ObjectiveKind.SUM, seed=seed, **FAST))
        assert_partition(result.assignment, problem)
        if sum_score(result.assignment, {}) == 3:
            hits += 1
    assert hits >= 1


def test_companions_end_up_together():
    people = [Person(f"P{i}", (f"P{(i + 3) % 8}",)) for i in range(6)] + [Person("X"), Person("Y")]
    problem = Problem(people, [4, 4], [CompanionPair("X", "Y")])
    result = anneal(problem, AnnealConfig(objective=ObjectiveKind.HYBRID, seed=11, **FAST))
    companions = problem.companion_map()
    assert companion_violations(result.assignment, companions) == 0
    assert result.score >= 0
    assert result.assignment.table_of("X") == result.assignment.table_of("Y")


@pytest.mark.parametrize("seed", range(5))
def test_final_score_not_below_initial(seed):
    people = [Person(f"P{i}", (f"P{(i * 5 + 1) % 12}", f"P{(i + 7) % 12}")) for i in range(12)]
    problem = Problem(people, [4, 4, 4])
    result = anneal(problem, AnnealConfig(seed=seed, **FAST))
    assert_partition(result.assignment, problem)
    assert result.score >= result.initial_score
    assert result.score == ObjectiveKind.HYBRID.evaluate(result.assignment, {})


def test_round_count_and_history():
    problem = Problem(four_people(), [2, 2])
    result = anneal(problem, AnnealConfig(seed=1, **FAST))
    # 1.0 -> 0.5 -> ... stops once the base temperature is at or below 0.01
    assert result.rounds == 7
    assert len(result.history) == 7
    assert result.history[-1] == result.score


def test_seeded_runs_are_reproducible():
    people = [Person(f"P{i}", (f"P{(i + 2) % 9}",)) for i in range(9)]
    problem = Problem(people, [3, 3, 3])
    config = AnnealConfig(seed=42, **FAST)
    first = anneal(problem, config)
    second = anneal(problem, config)
    assert first.assignment.as_mapping() == second.assignment.as_mapping()
    assert first.history == second.history


def test_single_rung_ladder():
    problem = Problem(four_people(), [2, 2])
    result = anneal(problem, AnnealConfig(seed=3, **dict(FAST, ladder_size=1)))
    assert_partition(result.assignment, problem)


@pytest.mark.parametrize(
    "overrides",
    [
        {"cooling_rate": 1.0},
        {"cooling_rate": 0.0},
        {"final_temperature": 0.0},
        {"base_temperature": -1.0},
        {"ladder_size": 0},
        {"internal_iterations": 0},
        {"swap_count": 0},
        {"base_temperature": math.inf},
        {"final_temperature": math.inf},
        {"base_temperature": math.nan},
        {"ladder_size": MAX_LADDER_SIZE + 1},
        {"executor": "gpu"},
    ],
)
def test_degenerate_parameters_rejected(overrides):
    config = AnnealConfig(**dict(FAST, **overrides))
    with pytest.raises(InvalidParameterError):
        ReplicaExchangeAnnealer(Problem(four_people(), [2, 2]), config)


def test_unknown_objective_rejected():
    with pytest.raises(UnknownObjectiveError):
        AnnealConfig(objective="best")


def test_headcount_mismatch_rejected_before_annealing():
    with pytest.raises(InconsistentProblemError):
        anneal(Problem(four_people(), [2, 3]), AnnealConfig(**FAST))


def test_zero_capacity_rejected():
    with pytest.raises(InvalidParameterError):
        anneal(Problem(four_people(), [4, 0]), AnnealConfig(**FAST))


def test_oversized_ladder_names_the_limit():
    config = AnnealConfig(**dict(FAST, final_temperature=0.95, internal_iterations=1, ladder_size=1030))
    with pytest.raises(InvalidParameterError, match=str(MAX_LADDER_SIZE)):
        anneal(Problem(four_people(), [2, 2]), config)


def test_largest_ladder_runs():
    config = AnnealConfig(**dict(FAST, final_temperature=0.6, internal_iterations=1, ladder_size=MAX_LADDER_SIZE))
    result = anneal(Problem(four_people(), [2, 2]), config)
    assert result.rounds == 1
    assert math.isfinite(level_temperature(config.base_temperature, MAX_LADDER_SIZE - 1))


def test_process_workers_match_threads():
    people = [Person(f"P{i}", (f"P{(i + 2) % 9}",)) for i in range(9)]
    problem = Problem(people, [3, 3, 3])
    threaded = anneal(problem, AnnealConfig(seed=8, **FAST))
    forked = anneal(problem, AnnealConfig(seed=8, executor="process", **FAST))
    assert forked.assignment.as_mapping() == threaded.assignment.as_mapping()
    assert forked.history == threaded.history
