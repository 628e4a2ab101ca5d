"""
Matrix view of the allocation state.

Banker's Algorithm and matrix-based detection both work on the classic
[P][R] matrices. They are rebuilt from the edge collections on every
analysis call, with explicit index maps:

    process id  -> row index    (registration order)
    resource id -> column index (registration order)
"""

from dataclasses import dataclass
from typing import Dict, List, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from models.system_state import SystemState


@dataclass(frozen=True)
class MatrixSnapshot:
    """
    Fixed-size matrices derived from one SystemState.

    Attributes:
        process_ids: Row labels, in registration order
        resource_ids: Column labels, in registration order
        process_index: pid -> row
        resource_index: rid -> column
        total_vector: [R] Total instances per resource
        allocation_matrix: [P][R] Units held (0 or 1 under possession semantics)
        max_demand_matrix: [P][R] Declared max, defaulting to current allocation
        request_matrix: [P][R] 1 where the process is queued on the resource
    """
    process_ids: List[str]
    resource_ids: List[str]
    process_index: Dict[str, int]
    resource_index: Dict[str, int]
    total_vector: np.ndarray
    allocation_matrix: np.ndarray
    max_demand_matrix: np.ndarray
    request_matrix: np.ndarray

    @property
    def num_processes(self) -> int:
        return len(self.process_ids)

    @property
    def num_resources(self) -> int:
        return len(self.resource_ids)

    @property
    def available_vector(self) -> np.ndarray:
        """Available[j] = total[j] - sum_i Allocation[i][j]."""
        return self.total_vector - self.allocation_matrix.sum(axis=0)

    @property
    def need_matrix(self) -> np.ndarray:
        """Need = Max - Allocation (may be negative for contradictory input)."""
        return self.max_demand_matrix - self.allocation_matrix


def build_matrix_snapshot(system_state: "SystemState") -> MatrixSnapshot:
    """
    Build the [P][R] matrices for the current state.

    Args:
        system_state: State to read (not modified)

    Returns:
        MatrixSnapshot with index maps and numpy matrices
    """
    process_ids = list(system_state.processes)
    resource_ids = [r.rid for r in system_state.resources]
    process_index = {pid: i for i, pid in enumerate(process_ids)}
    resource_index = {rid: j for j, rid in enumerate(resource_ids)}

    shape = (len(process_ids), len(resource_ids))
    total_vector = np.array([r.instances for r in system_state.resources], dtype=int)
    allocation_matrix = np.zeros(shape, dtype=int)
    request_matrix = np.zeros(shape, dtype=int)

    for edge in system_state.assignment_edges:
        allocation_matrix[process_index[edge.pid]][resource_index[edge.rid]] += 1

    for edge in system_state.request_edges:
        request_matrix[process_index[edge.pid]][resource_index[edge.rid]] = 1

    # Absent max entries default to the current holding
    max_demand_matrix = allocation_matrix.copy()
    for (pid, rid), value in system_state.max_demand_table.items():
        max_demand_matrix[process_index[pid]][resource_index[rid]] = value

    return MatrixSnapshot(
        process_ids=process_ids,
        resource_ids=resource_ids,
        process_index=process_index,
        resource_index=resource_index,
        total_vector=total_vector,
        allocation_matrix=allocation_matrix,
        max_demand_matrix=max_demand_matrix,
        request_matrix=request_matrix,
    )
