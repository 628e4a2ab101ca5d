"""
Banker's Algorithm Tests

Safety sweep on explicit matrices (textbook example) and on allocation
states built through the request/release protocol.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.errors import UnknownProcessError
from models.system_state import SystemState
from algorithms.request_release import handle_request
from algorithms.avoidance import (
    SafetyStatus,
    check_request_safety,
    find_safe_sequence,
    is_safe_state,
)


# Silberschatz et al., 5 processes / 3 resource types (A=10, B=5, C=7)
TEXTBOOK_PIDS = ["P0", "P1", "P2", "P3", "P4"]
TEXTBOOK_ALLOCATION = np.array([
    [0, 1, 0],
    [2, 0, 0],
    [3, 0, 2],
    [2, 1, 1],
    [0, 0, 2],
])
TEXTBOOK_MAX = np.array([
    [7, 5, 3],
    [3, 2, 2],
    [9, 0, 2],
    [2, 2, 2],
    [4, 3, 3],
])
TEXTBOOK_AVAILABLE = np.array([3, 3, 2])


def make_state(processes, resources):
    state = SystemState()
    for pid in processes:
        state.register_process(pid)
    for rid, instances in resources:
        state.register_resource(rid, instances)
    return state


def test_textbook_example_is_safe():
    """The classic 5x3 example is safe and the sequence is a valid order."""
    print("\n" + "=" * 60)
    print("TEST: Textbook Banker's example")
    print("=" * 60)

    safe, sequence, work = find_safe_sequence(
        TEXTBOOK_PIDS, TEXTBOOK_ALLOCATION, TEXTBOOK_MAX, TEXTBOOK_AVAILABLE
    )
    print(f"  Safe sequence: {' -> '.join(sequence)}")

    assert safe
    assert sequence == ["P1", "P3", "P4", "P0", "P2"]
    assert list(work) == [10, 5, 7]

    # Every prefix frees enough for the next process's need
    need = TEXTBOOK_MAX - TEXTBOOK_ALLOCATION
    available = TEXTBOOK_AVAILABLE.copy()
    for pid in sequence:
        i = TEXTBOOK_PIDS.index(pid)
        assert np.all(need[i] <= available)
        available = available + TEXTBOOK_ALLOCATION[i]


def test_textbook_example_unsafe_variant():
    """Lowering Available to zero leaves nobody able to finish."""
    safe, sequence, work = find_safe_sequence(
        TEXTBOOK_PIDS, TEXTBOOK_ALLOCATION, TEXTBOOK_MAX, np.array([0, 0, 0])
    )
    assert not safe
    assert sequence == []
    assert list(work) == [0, 0, 0]


def test_degenerate_states_are_safe():
    """No processes or no resources: trivially safe, empty sequence."""
    result = is_safe_state(SystemState())
    assert result.safe
    assert result.sequence == []
    assert result.status == SafetyStatus.SAFE

    result = is_safe_state(make_state([], [("R1", 2)]))
    assert result.safe
    assert result.available == [2]

    result = is_safe_state(make_state(["P1"], []))
    assert result.safe
    assert result.sequence == []


def test_undeclared_max_defaults_to_allocation():
    """Without declarations every Need is zero: safe in registration order."""
    state = make_state(["P1", "P2", "P3"], [("R1", 1), ("R2", 2)])
    handle_request(state, "P2", "R1")
    handle_request(state, "P3", "R2")
    handle_request(state, "P1", "R1")

    result = is_safe_state(state)
    assert result.safe
    assert result.sequence == ["P1", "P2", "P3"]
    assert result.available == [1, 2]


def test_safe_state_from_edges():
    """Declared maxima admitting a completion order."""
    state = make_state(["P1", "P2", "P3"], [("DISK", 2), ("TAPE", 1)])
    for pid, rid, value in [
        ("P1", "DISK", 1), ("P1", "TAPE", 1),
        ("P2", "DISK", 1), ("P2", "TAPE", 1),
        ("P3", "TAPE", 1),
    ]:
        state.set_max_demand(pid, rid, value)
    handle_request(state, "P1", "DISK")
    handle_request(state, "P1", "TAPE")
    handle_request(state, "P2", "DISK")

    result = is_safe_state(state)
    assert result.safe
    assert result.sequence == ["P1", "P2", "P3"]
    assert result.available == [2, 1]
    assert result.message == "System is in a SAFE state."


def test_later_pass_progress():
    """A process skipped early in a pass is picked up by the next pass."""
    state = make_state(["P1", "P2"], [("R1", 1)])
    state.set_max_demand("P1", "R1", 1)
    handle_request(state, "P2", "R1")

    result = is_safe_state(state)
    assert result.safe
    assert result.sequence == ["P2", "P1"]


def test_unsafe_need_exceeds_total():
    """A process needing more than exists never finishes."""
    state = make_state(["P1", "P2"], [("R1", 2)])
    state.set_max_demand("P1", "R1", 3)
    state.set_max_demand("P2", "R1", 1)
    handle_request(state, "P2", "R1")

    result = is_safe_state(state)
    assert not result.safe
    assert result.status == SafetyStatus.UNSAFE
    assert result.sequence == ["P2"]
    assert result.available == [2]
    assert "NOT in a safe state" in result.message


def test_unsafe_mutual_need():
    """Each process needs what the other holds."""
    state = make_state(["P1", "P2"], [("R1", 1), ("R2", 1)])
    state.set_max_demand("P1", "R2", 1)
    state.set_max_demand("P2", "R1", 1)
    handle_request(state, "P1", "R1")
    handle_request(state, "P2", "R2")

    result = is_safe_state(state)
    assert not result.safe
    assert result.sequence == []
    assert result.available == [0, 0]


def test_allocation_exceeds_declared_max():
    """Max below current allocation aborts before the sweep."""
    state = make_state(["P1", "P2"], [("R1", 1)])
    handle_request(state, "P2", "R1")
    state.set_max_demand("P2", "R1", 0)

    result = is_safe_state(state)
    assert not result.safe
    assert result.status == SafetyStatus.INCONSISTENT
    assert result.sequence == []
    assert "exceeds declared max for process P2" in result.message


def test_check_request_safety():
    """Tentative grants are judged without touching the state."""
    state = make_state(["P1", "P2"], [("R1", 1), ("R2", 1)])
    for pid in ("P1", "P2"):
        state.set_max_demand(pid, "R1", 1)
        state.set_max_demand(pid, "R2", 1)
    handle_request(state, "P1", "R1")
    before = (state.assignment_edges, state.request_edges)

    result = check_request_safety(state, "P2", "R2")
    assert not result.safe
    assert result.status == SafetyStatus.UNSAFE

    result = check_request_safety(state, "P1", "R2")
    assert result.safe
    assert result.sequence == ["P1", "P2"]

    result = check_request_safety(state, "P2", "R1")
    assert result.status == SafetyStatus.WOULD_WAIT

    assert (state.assignment_edges, state.request_edges) == before


def test_check_request_safety_max_handling():
    """Undeclared max follows the grant; a declared zero max is exceeded."""
    state = make_state(["P1", "P2"], [("R1", 2)])
    assert check_request_safety(state, "P1", "R1").safe

    state.set_max_demand("P2", "R1", 0)
    result = check_request_safety(state, "P2", "R1")
    assert result.status == SafetyStatus.INCONSISTENT

    with pytest.raises(UnknownProcessError):
        check_request_safety(state, "P9", "R1")
