"""
Deadlock Detection for the Resource Allocation & Deadlock Simulator.

Two detectors over the same state:

- detect_deadlock: builds the wait-for graph and reports the first cycle
  found by a deterministic depth-first search.
- detect_deadlocked_processes: matrix-based Work/Finish algorithm that
  reports every process that can never complete.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from models.system_state import SystemState


# DFS colouring
UNVISITED = 0
ON_STACK = 1
FINISHED = 2


@dataclass
class DeadlockResult:
    """
    Outcome of wait-for-graph deadlock detection.

    Attributes:
        has_deadlock: True if the wait-for graph has a cycle
        cycle: Closed walk of process ids (first == last), empty if none
    """
    has_deadlock: bool
    cycle: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        if not self.has_deadlock:
            return "No deadlock"
        return "Deadlock: " + " -> ".join(self.cycle)


def build_wait_for_graph(system_state: SystemState) -> Dict[str, List[str]]:
    """
    Build the wait-for graph: an edge p -> h means p is queued on a
    resource currently held by h.

    Every registered process is a node, in registration order. Adjacency
    lists follow request edge order, then holder order, without duplicates
    or self-loops.

    Args:
        system_state: State to read

    Returns:
        Ordered adjacency mapping pid -> list of pids
    """
    graph: Dict[str, List[str]] = {pid: [] for pid in system_state.processes}

    for edge in system_state.request_edges:
        for holder in system_state.holders_of(edge.rid):
            if holder != edge.pid and holder not in graph[edge.pid]:
                graph[edge.pid].append(holder)

    return graph


def find_cycle(graph: Dict[str, List[str]]) -> Optional[List[str]]:
    """
    Find the first cycle of a directed graph.

    Iterative three-state DFS with an explicit stack of
    (node, next-neighbour-index) frames and a parent map. Roots are taken
    in the graph's key order and neighbours in list order, so the reported
    cycle is fully determined by insertion order.

    Args:
        graph: Ordered adjacency mapping

    Returns:
        Closed walk [v, ..., v] for the first cycle found, or None
    """
    colour = {node: UNVISITED for node in graph}
    parent: Dict[str, Optional[str]] = {}

    for root in graph:
        if colour[root] != UNVISITED:
            continue

        parent[root] = None
        colour[root] = ON_STACK
        stack = [[root, 0]]

        while stack:
            frame = stack[-1]
            node, index = frame
            neighbours = graph[node]

            if index == len(neighbours):
                colour[node] = FINISHED
                stack.pop()
                continue

            frame[1] = index + 1
            target = neighbours[index]

            if colour[target] == UNVISITED:
                parent[target] = node
                colour[target] = ON_STACK
                stack.append([target, 0])
            elif colour[target] == ON_STACK:
                # Walk back from the current node to the repeated one
                cycle = [target]
                current = node
                while current != target and current is not None:
                    cycle.append(current)
                    current = parent[current]
                cycle.append(target)
                cycle.reverse()
                return cycle

    return None


def detect_deadlock(system_state: SystemState) -> DeadlockResult:
    """
    Detect deadlock as a cycle in the wait-for graph.

    Stops at the first cycle; it does not enumerate all of them.

    Args:
        system_state: Current system state (not modified)

    Returns:
        DeadlockResult with the offending cycle, if any
    """
    cycle = find_cycle(build_wait_for_graph(system_state))
    if cycle is None:
        return DeadlockResult(has_deadlock=False, cycle=[])
    return DeadlockResult(has_deadlock=True, cycle=cycle)


def detect_deadlocked_processes(system_state: SystemState) -> List[str]:
    """
    Detect deadlocked processes using the matrix-based Work/Finish algorithm.

    Algorithm:
    1. Work = Available, Finish[i] = False
    2. Find i with Finish[i] == False and Request[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], repeat
    4. Every process left with Finish[i] == False is deadlocked

    Uses Request[i] (current pending requests), not Need[i].

    Args:
        system_state: Current system state (not modified)

    Returns:
        Deadlocked process ids in registration order (empty if none)

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 8: Deadlocks.
    """
    snapshot = system_state.snapshot_matrices()
    if snapshot.num_processes == 0:
        return []

    work = snapshot.available_vector.copy()
    finish = np.zeros(snapshot.num_processes, dtype=bool)

    found_progress = True
    while found_progress:
        found_progress = False
        for i in range(snapshot.num_processes):
            if finish[i]:
                continue
            if np.all(snapshot.request_matrix[i] <= work):
                work += snapshot.allocation_matrix[i]
                finish[i] = True
                found_progress = True

    return [pid for i, pid in enumerate(snapshot.process_ids) if not finish[i]]
