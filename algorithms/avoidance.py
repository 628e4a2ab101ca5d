"""
Deadlock Avoidance (Banker's Algorithm) for the Simulator.

Checks whether the current allocation state is safe with respect to the
declared maximum demands, and whether granting a single request would
keep it safe.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple

import numpy as np

from models.system_state import SystemState


class SafetyStatus(Enum):
    """Outcome category of a safety check."""
    SAFE = "safe"
    UNSAFE = "unsafe"
    # Declared max below current allocation: contradictory input, not a verdict
    INCONSISTENT = "inconsistent"
    # No free unit: the request would queue instead of being granted
    WOULD_WAIT = "would_wait"


@dataclass
class SafetyResult:
    """
    Outcome of Banker's safety algorithm.

    Attributes:
        safe: True if every process can finish in some order
        sequence: Processes that could finish, in discovery order
        available: Work vector after the sweep, per resource in registration order
        message: Human-readable explanation
        status: SAFE, UNSAFE, INCONSISTENT or WOULD_WAIT
    """
    safe: bool
    sequence: List[str] = field(default_factory=list)
    available: List[int] = field(default_factory=list)
    message: str = ""
    status: SafetyStatus = SafetyStatus.SAFE


def find_safe_sequence(
    process_ids: Sequence[str],
    allocation: np.ndarray,
    maximum: np.ndarray,
    available: np.ndarray
) -> Tuple[bool, List[str], np.ndarray]:
    """
    Run the Banker's safety sweep on explicit matrices.

    Algorithm:
    1. Work = Available, Finish = [False] * P
    2. Pass over processes in row order; every unfinished i with
       Need[i] <= Work finishes in this pass: Work += Allocation[i]
    3. Repeat passes until one makes no progress
    4. Safe iff every process finished

    Time Complexity: O(P²×R)

    Args:
        process_ids: Row labels
        allocation: [P][R] current allocation
        maximum: [P][R] declared maximum demand
        available: [R] free instances

    Returns:
        Tuple of (is_safe, sequence of finished ids, final work vector)

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 8.6: Deadlock Avoidance.
    """
    allocation = np.asarray(allocation, dtype=int)
    need = np.asarray(maximum, dtype=int) - allocation
    work = np.array(available, dtype=int)
    finish = np.zeros(len(process_ids), dtype=bool)
    sequence = []

    made_progress = True
    while made_progress:
        made_progress = False
        for i, pid in enumerate(process_ids):
            if finish[i]:
                continue
            if np.all(need[i] <= work):
                # Process can finish: add its allocation back to work
                work += allocation[i]
                finish[i] = True
                sequence.append(pid)
                made_progress = True

    return bool(np.all(finish)), sequence, work


def _evaluate(
    process_ids: List[str],
    resource_ids: List[str],
    allocation: np.ndarray,
    maximum: np.ndarray,
    available: np.ndarray
) -> SafetyResult:
    """Pre-check Need >= 0, then run the sweep."""
    need = maximum - allocation
    for i, pid in enumerate(process_ids):
        for j, rid in enumerate(resource_ids):
            if need[i][j] < 0:
                return SafetyResult(
                    safe=False,
                    sequence=[],
                    available=[int(x) for x in available],
                    message=f"Allocation exceeds declared max for process {pid} on resource {rid}.",
                    status=SafetyStatus.INCONSISTENT
                )

    safe, sequence, work = find_safe_sequence(process_ids, allocation, maximum, available)

    if safe:
        message = "System is in a SAFE state."
        status = SafetyStatus.SAFE
    else:
        message = "System is NOT in a safe state. No complete safe sequence exists."
        status = SafetyStatus.UNSAFE

    return SafetyResult(
        safe=safe,
        sequence=sequence,
        available=[int(x) for x in work],
        message=message,
        status=status
    )


def is_safe_state(system_state: SystemState) -> SafetyResult:
    """
    Check if the system is in a safe state using Banker's Algorithm.

    Max defaults to the current allocation wherever no maximum was
    declared. If any declared max is below the current allocation the
    sweep is not run and an INCONSISTENT result is returned.

    Args:
        system_state: Current system state (not modified)

    Returns:
        SafetyResult
    """
    snapshot = system_state.snapshot_matrices()

    if snapshot.num_processes == 0 or snapshot.num_resources == 0:
        return SafetyResult(
            safe=True,
            sequence=[],
            available=[int(x) for x in snapshot.available_vector],
            message="No processes or resources.",
            status=SafetyStatus.SAFE
        )

    return _evaluate(
        snapshot.process_ids,
        snapshot.resource_ids,
        snapshot.allocation_matrix,
        snapshot.max_demand_matrix,
        snapshot.available_vector
    )


def check_request_safety(system_state: SystemState, pid: str, rid: str) -> SafetyResult:
    """
    Would granting one unit of `rid` to `pid` leave the system safe?

    Steps:
    1. Validate ids
    2. If pid already holds rid, nothing changes: check the current state
    3. If no unit is free, the request would wait: WOULD_WAIT
    4. Tentatively grant on a copy of the matrices and run the safety check

    The state itself is never modified.

    Raises:
        UnknownProcessError, UnknownResourceError: Unregistered ids
    """
    system_state.require_process(pid)
    system_state.require_resource(rid)

    if system_state.holds(pid, rid):
        return is_safe_state(system_state)

    if system_state.free_instances(rid) == 0:
        return SafetyResult(
            safe=False,
            message=f"No free instance of {rid}; {pid} would wait.",
            status=SafetyStatus.WOULD_WAIT
        )

    snapshot = system_state.snapshot_matrices()
    i = snapshot.process_index[pid]
    j = snapshot.resource_index[rid]

    allocation = snapshot.allocation_matrix.copy()
    maximum = snapshot.max_demand_matrix.copy()
    allocation[i][j] += 1
    if system_state.max_demand(pid, rid) is None:
        maximum[i][j] = allocation[i][j]
    available = snapshot.total_vector - allocation.sum(axis=0)

    return _evaluate(snapshot.process_ids, snapshot.resource_ids, allocation, maximum, available)
