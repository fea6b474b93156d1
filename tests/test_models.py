import dataclasses

import numpy as np
import pytest

from seating_annealer.errors import InconsistentProblemError, InvalidParameterError
from seating_annealer.models import (
    Assignment,
    CompanionPair,
    Person,
    Problem,
    Table,
    parse_pipe_list,
)


def make_people(n):
    return [Person(f"P{i}", (f"P{(i + 1) % n}",)) for i in range(n)]


def assert_partition(assignment, people, capacities):
    names = [p.name for p in assignment.people()]
    assert sorted(names) == sorted(p.name for p in people)
    assert [t.capacity for t in assignment.tables] == list(capacities)
    for table in assignment.tables:
        assert len(table.occupants) == table.capacity
        assert table.people_map == {p.name for p in table.occupants}


def changed_slots(before, after):
    return sum(
        1
        for t_before, t_after in zip(before.tables, after.tables)
        for a, b in zip(t_before.occupants, t_after.occupants)
        if a != b
    )


def test_person_is_immutable():
    person = Person("Alex", ("Sam",))
    with pytest.raises(dataclasses.FrozenInstanceError):
        person.name = "Sam"


def test_parse_pipe_list():
    assert parse_pipe_list("a| b |") == ["a", "b"]
    assert parse_pipe_list(float("nan")) == []
    assert parse_pipe_list(None) == []


def test_table_seated_requires_full_table():
    with pytest.raises(InconsistentProblemError):
        Table.seated(3, [Person("A"), Person("B")])


def test_table_replace_keeps_membership_in_sync():
    table = Table.seated(2, [Person("A"), Person("B")])
    previous = table.replace(0, Person("C"))
    assert previous.name == "A"
    assert "C" in table and "A" not in table
    assert table.people_map == {"B", "C"}


@pytest.mark.parametrize("seed", range(10))
def test_random_assignment_is_a_partition(seed):
    people = make_people(10)
    capacities = [3, 3, 4]
    assignment = Assignment.random(people, capacities, np.random.default_rng(seed))
    assert_partition(assignment, people, capacities)


def test_random_assignment_rejects_headcount_mismatch():
    with pytest.raises(InconsistentProblemError):
        Assignment.random(make_people(5), [2, 2], np.random.default_rng(0))


def test_random_assignment_rejects_zero_capacity():
    with pytest.raises(InvalidParameterError):
        Assignment.random(make_people(4), [4, 0], np.random.default_rng(0))


def test_clone_shares_no_mutable_state():
    assignment = Assignment.random(make_people(4), [2, 2], np.random.default_rng(1))
    copy = assignment.clone()
    outsider = Person("Z")
    copy.tables[0].replace(0, outsider)
    assert "Z" not in assignment.tables[0]
    assert all(p.name != "Z" for p in assignment.people())
    assert copy.tables[0].people_map is not assignment.tables[0].people_map


@pytest.mark.parametrize("swap_count", [1, 2, 3])
def test_neighbor_is_local_and_leaves_input_untouched(swap_count):
    people = make_people(12)
    capacities = [4, 4, 2, 2]
    rng = np.random.default_rng(swap_count)
    start = Assignment.random(people, capacities, rng)
    snapshot = [list(t.occupants) for t in start.tables]
    for _ in range(50):
        neighbor = start.neighbor(swap_count, rng)
        assert_partition(neighbor, people, capacities)
        assert changed_slots(start, neighbor) <= 2 * swap_count
    assert [list(t.occupants) for t in start.tables] == snapshot


def test_single_swap_moves_two_people_between_tables():
    people = make_people(6)
    rng = np.random.default_rng(3)
    start = Assignment.random(people, [3, 3], rng)
    neighbor = start.neighbor(1, rng)
    assert changed_slots(start, neighbor) == 2
    before = start.as_mapping()
    after = neighbor.as_mapping()
    moved = [name for name in before if before[name] != after[name]]
    assert len(moved) == 2


def test_neighbor_of_single_table_is_unchanged_copy():
    people = make_people(3)
    start = Assignment.random(people, [3], np.random.default_rng(0))
    neighbor = start.neighbor(2, np.random.default_rng(0))
    assert neighbor is not start
    assert changed_slots(start, neighbor) == 0


def test_problem_validation():
    people = [Person("A"), Person("B")]
    Problem(people, [2], [CompanionPair("A", "B")]).validate()
    with pytest.raises(InconsistentProblemError):
        Problem([Person("A"), Person("A")], [2]).validate()
    with pytest.raises(InconsistentProblemError):
        Problem(people, [3]).validate()
    with pytest.raises(InconsistentProblemError):
        Problem(people, [2], [CompanionPair("A", "Nobody")]).validate()


def test_companion_map_is_one_directional():
    problem = Problem([Person("A"), Person("B")], [2], [CompanionPair("A", "B")])
    assert problem.companion_map() == {"A": "B"}
