"""
Core Data Model Tests

Tests Resource, SystemState registration, queries, matrices and invariants.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.edges import AssignmentEdge, RequestEdge
from models.errors import (
    AllocationError,
    DuplicateIdError,
    InvalidInstanceCountError,
    InvalidValueError,
    UnknownProcessError,
    UnknownResourceError,
)
from models.process import ProcessState
from models.resource import Resource
from models.system_state import SystemState
from algorithms.request_release import handle_request


def make_state(processes=("P1", "P2"), resources=(("R1", 1), ("R2", 2))):
    state = SystemState()
    for pid in processes:
        state.register_process(pid)
    for rid, instances in resources:
        state.register_resource(rid, instances)
    return state


def test_resource_model():
    """Resource rejects non-positive and non-integer instance counts."""
    assert Resource(rid="R1", instances=3).instances == 3

    for bad in (0, -1, 1.5, "2", True):
        with pytest.raises(InvalidInstanceCountError):
            Resource(rid="R1", instances=bad)


def test_registration_order_and_duplicates():
    """Registration keeps order and rejects duplicates without side effects."""
    state = make_state(processes=("P2", "P1", "P3"))
    assert state.processes == ["P2", "P1", "P3"]
    assert [r.rid for r in state.resources] == ["R1", "R2"]

    with pytest.raises(DuplicateIdError):
        state.register_process("P1")
    with pytest.raises(DuplicateIdError):
        state.register_resource("R2", 5)
    with pytest.raises(InvalidInstanceCountError):
        state.register_resource("R3", 0)
    with pytest.raises(AllocationError):
        state.register_process("")

    assert state.num_processes == 3
    assert state.num_resources == 2
    assert state.has_process("P3")
    assert not state.has_resource("R3")
    assert state.require_resource("R2").instances == 2


def test_set_max_demand_validation():
    """Max demand requires known ids and a non-negative integer."""
    state = make_state()
    state.set_max_demand("P1", "R2", 2)
    state.set_max_demand("P1", "R1", 0)
    assert state.max_demand("P1", "R2") == 2
    assert state.max_demand("P2", "R2") is None

    with pytest.raises(UnknownProcessError):
        state.set_max_demand("P9", "R1", 1)
    with pytest.raises(UnknownResourceError):
        state.set_max_demand("P1", "R9", 1)
    for bad in (-1, 1.0, None):
        with pytest.raises(InvalidValueError):
            state.set_max_demand("P2", "R1", bad)

    assert state.max_demand_table == {("P1", "R2"): 2, ("P1", "R1"): 0}


def test_queries():
    """Read-only accessors reflect the edge collections."""
    state = make_state(processes=("P1", "P2", "P3"))
    handle_request(state, "P1", "R2")
    handle_request(state, "P2", "R2")
    handle_request(state, "P3", "R2")
    handle_request(state, "P3", "R1")

    assert state.holders_of("R2") == ["P1", "P2"]
    assert state.allocated_instances("R2") == 2
    assert state.free_instances("R2") == 0
    assert state.free_instances("R1") == 0
    assert state.waiters_for("R2") == ["P3"]
    assert state.held_by("P3") == ["R1"]
    assert state.waiting_on("P3") == ["R2"]
    assert state.assignment_edges == (
        AssignmentEdge("R2", "P1"),
        AssignmentEdge("R2", "P2"),
        AssignmentEdge("R1", "P3"),
    )
    assert state.request_edges == (RequestEdge("P3", "R2"),)
    assert state.process_state("P3") == ProcessState.WAITING
    assert state.process_state("P1") == ProcessState.HOLDING

    with pytest.raises(UnknownResourceError):
        state.free_instances("R9")


def test_accessors_return_copies():
    """Mutating a returned collection does not touch the state."""
    state = make_state()
    handle_request(state, "P1", "R1")
    state.set_max_demand("P1", "R1", 1)

    table = state.max_demand_table
    table[("P2", "R1")] = 7
    processes = state.processes
    processes.append("P9")

    assert state.max_demand("P2", "R1") is None
    assert state.processes == ["P1", "P2"]
    assert len(state.assignment_edges) == 1


def test_matrix_snapshot():
    """Allocation, Max (defaulting to Allocation), Need and Available."""
    state = make_state()
    handle_request(state, "P1", "R1")
    handle_request(state, "P2", "R2")
    handle_request(state, "P2", "R1")
    state.set_max_demand("P1", "R2", 2)

    snapshot = state.snapshot_matrices()
    print(f"\nAllocation:\n{snapshot.allocation_matrix}")

    assert snapshot.process_index == {"P1": 0, "P2": 1}
    assert snapshot.resource_index == {"R1": 0, "R2": 1}
    assert np.array_equal(snapshot.allocation_matrix, [[1, 0], [0, 1]])
    assert np.array_equal(snapshot.max_demand_matrix, [[1, 2], [0, 1]])
    assert np.array_equal(snapshot.need_matrix, [[0, 2], [0, 0]])
    assert np.array_equal(snapshot.request_matrix, [[0, 0], [1, 0]])
    assert np.array_equal(snapshot.available_vector, [0, 1])


def test_empty_matrix_snapshot():
    """Zero processes or resources give empty but well-formed matrices."""
    state = make_state(processes=())
    snapshot = state.snapshot_matrices()
    assert snapshot.allocation_matrix.shape == (0, 2)
    assert np.array_equal(snapshot.available_vector, [1, 2])

    state = make_state(resources=())
    snapshot = state.snapshot_matrices()
    assert snapshot.allocation_matrix.shape == (2, 0)
    assert snapshot.available_vector.shape == (0,)


def test_display():
    """display() renders edges and matrices."""
    state = make_state()
    handle_request(state, "P1", "R1")
    handle_request(state, "P2", "R1")

    output = state.display()
    print(output)
    assert "SYSTEM STATE" in output
    assert "R1 -> P1" in output
    assert "P2 -> R1" in output
    assert "Need Matrix" in output
    assert "WAITING" in output


def test_assert_invariants():
    """assert_invariants passes for reachable states and catches corruption."""
    state = make_state()
    handle_request(state, "P1", "R1")
    handle_request(state, "P2", "R1")
    state.assert_invariants("after requests")

    # Corrupt the state behind the protocol's back
    state._request_edges.append(RequestEdge("P1", "R1"))
    with pytest.raises(AssertionError):
        state.assert_invariants("after corruption")


def test_edge_mutators_refuse_invariant_breaks():
    """Direct mutator calls that would break an invariant raise and change nothing."""
    state = make_state()
    state.add_assignment("R1", "P1")

    with pytest.raises(AllocationError):
        state.add_assignment("R1", "P1")
    with pytest.raises(AllocationError):
        state.add_assignment("R1", "P2")
    with pytest.raises(AllocationError):
        state.add_request("P1", "R1")

    state.add_request("P2", "R1")
    with pytest.raises(AllocationError):
        state.add_request("P2", "R1")

    assert state.assignment_edges == (AssignmentEdge("R1", "P1"),)
    assert state.request_edges == (RequestEdge("P2", "R1"),)
    state.assert_invariants("after refused mutations")
