"""
System State model for the Resource Allocation & Deadlock Simulator.

Holds the ground truth of a simulation session: registered processes and
resources, the assignment and request edges of the resource-allocation
graph, and the declared maximum-demand table used by Banker's Algorithm.
"""

from typing import Dict, List, Optional, Tuple

from models.edges import AssignmentEdge, RequestEdge
from models.errors import (
    AllocationError,
    DuplicateIdError,
    InvalidValueError,
    UnknownProcessError,
    UnknownResourceError,
)
from models.matrices import MatrixSnapshot, build_matrix_snapshot
from models.process import Process, ProcessState
from models.resource import Resource


class SystemState:
    """
    Allocation state for one simulation session.

    Processes and resources keep registration order; both edge collections
    keep insertion order, which drives FIFO wake-up and the traversal order
    of the wait-for graph.

    Invariants (see assert_invariants):
        I1: holders of a resource <= its instances
        I2: no (resource, process) pair is both assigned and requested
        I3: no duplicate edges
        I4: every edge references registered ids
    """

    def __init__(self):
        self._processes: Dict[str, Process] = {}
        self._resources: Dict[str, Resource] = {}
        self._assignment_edges: List[AssignmentEdge] = []
        self._request_edges: List[RequestEdge] = []
        self._max_demand: Dict[Tuple[str, str], int] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_process(self, pid: str) -> Process:
        """
        Register a new process with no edges.

        Args:
            pid: Unique process id

        Returns:
            The registered Process

        Raises:
            DuplicateIdError: If pid is already registered
        """
        if not isinstance(pid, str) or not pid:
            raise AllocationError(f"Process id must be a non-empty string (got {pid!r})")
        if pid in self._processes:
            raise DuplicateIdError("Process", pid)
        process = Process(pid=pid)
        self._processes[pid] = process
        return process

    def register_resource(self, rid: str, instances: int) -> Resource:
        """
        Register a new resource.

        Args:
            rid: Unique resource id
            instances: Total unit count (integer >= 1)

        Returns:
            The registered Resource

        Raises:
            DuplicateIdError: If rid is already registered
            InvalidInstanceCountError: If instances < 1
        """
        if not isinstance(rid, str) or not rid:
            raise AllocationError(f"Resource id must be a non-empty string (got {rid!r})")
        if rid in self._resources:
            raise DuplicateIdError("Resource", rid)
        resource = Resource(rid=rid, instances=instances)
        self._resources[rid] = resource
        return resource

    def set_max_demand(self, pid: str, rid: str, value: int) -> None:
        """
        Declare the maximum units of `rid` that `pid` may ever hold.

        Raises:
            UnknownProcessError, UnknownResourceError: Unregistered ids
            InvalidValueError: If value is not an integer >= 0
        """
        self.require_process(pid)
        self.require_resource(rid)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidValueError(pid, rid, value)
        self._max_demand[(pid, rid)] = value

    def require_process(self, pid: str) -> Process:
        """Return the process or raise UnknownProcessError."""
        try:
            return self._processes[pid]
        except (KeyError, TypeError):
            raise UnknownProcessError(pid) from None

    def require_resource(self, rid: str) -> Resource:
        """Return the resource or raise UnknownResourceError."""
        try:
            return self._resources[rid]
        except (KeyError, TypeError):
            raise UnknownResourceError(rid) from None

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @property
    def num_processes(self) -> int:
        """Number of registered processes."""
        return len(self._processes)

    @property
    def num_resources(self) -> int:
        """Number of registered resources."""
        return len(self._resources)

    @property
    def processes(self) -> List[str]:
        """Process ids in registration order."""
        return list(self._processes)

    @property
    def resources(self) -> List[Resource]:
        """Resources in registration order."""
        return list(self._resources.values())

    @property
    def assignment_edges(self) -> Tuple[AssignmentEdge, ...]:
        """Assignment edges (R -> P) in insertion order."""
        return tuple(self._assignment_edges)

    @property
    def request_edges(self) -> Tuple[RequestEdge, ...]:
        """Request edges (P -> R) in insertion order."""
        return tuple(self._request_edges)

    @property
    def max_demand_table(self) -> Dict[Tuple[str, str], int]:
        """Copy of the declared (pid, rid) -> max table."""
        return dict(self._max_demand)

    def has_process(self, pid: str) -> bool:
        return pid in self._processes

    def has_resource(self, rid: str) -> bool:
        return rid in self._resources

    def max_demand(self, pid: str, rid: str) -> Optional[int]:
        """Declared max for (pid, rid), or None when not declared."""
        return self._max_demand.get((pid, rid))

    def holders_of(self, rid: str) -> List[str]:
        """Processes currently holding a unit of `rid`, in grant order."""
        self.require_resource(rid)
        return [e.pid for e in self._assignment_edges if e.rid == rid]

    def waiters_for(self, rid: str) -> List[str]:
        """Processes queued on `rid`, earliest first."""
        self.require_resource(rid)
        return [e.pid for e in self._request_edges if e.rid == rid]

    def allocated_instances(self, rid: str) -> int:
        """Number of units of `rid` currently held."""
        return len(self.holders_of(rid))

    def free_instances(self, rid: str) -> int:
        """instances(rid) - allocated_instances(rid)."""
        return self.require_resource(rid).instances - self.allocated_instances(rid)

    def holds(self, pid: str, rid: str) -> bool:
        return AssignmentEdge(rid, pid) in self._assignment_edges

    def is_waiting(self, pid: str, rid: str) -> bool:
        return RequestEdge(pid, rid) in self._request_edges

    def held_by(self, pid: str) -> List[str]:
        """Resources held by `pid`, in grant order."""
        self.require_process(pid)
        return [e.rid for e in self._assignment_edges if e.pid == pid]

    def waiting_on(self, pid: str) -> List[str]:
        """Resources `pid` is queued on, in request order."""
        self.require_process(pid)
        return [e.rid for e in self._request_edges if e.pid == pid]

    def process_state(self, pid: str) -> ProcessState:
        """Derive the display state of a process from its edges."""
        if self.waiting_on(pid):
            return ProcessState.WAITING
        if self.held_by(pid):
            return ProcessState.HOLDING
        return ProcessState.IDLE

    def snapshot_matrices(self) -> MatrixSnapshot:
        """Build Allocation/Max/Request matrices for one analysis call."""
        return build_matrix_snapshot(self)

    # ------------------------------------------------------------------
    # Edge mutators
    #
    # Callers validate before calling these (see algorithms.request_release).
    # ------------------------------------------------------------------

    def add_assignment(self, rid: str, pid: str) -> None:
        """
        Record that `pid` holds one unit of `rid`.

        Raises:
            AllocationError: If the edge exists or no unit is free
        """
        edge = AssignmentEdge(rid, pid)
        if edge in self._assignment_edges:
            raise AllocationError(f"Duplicate assignment {edge}")
        if self.free_instances(rid) <= 0:
            raise AllocationError(f"No free instance of {rid} for {pid}")
        self._assignment_edges.append(edge)

    def remove_assignment(self, rid: str, pid: str) -> None:
        self._assignment_edges.remove(AssignmentEdge(rid, pid))

    def add_request(self, pid: str, rid: str) -> None:
        """
        Queue `pid` on `rid`.

        Raises:
            AllocationError: If the edge exists or `pid` already holds `rid`
        """
        edge = RequestEdge(pid, rid)
        if edge in self._request_edges:
            raise AllocationError(f"Duplicate request {edge}")
        if self.holds(pid, rid):
            raise AllocationError(f"{pid} already holds {rid}")
        self._request_edges.append(edge)

    def remove_request(self, pid: str, rid: str) -> None:
        self._request_edges.remove(RequestEdge(pid, rid))

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def display(self) -> str:
        """
        Generate readable string representation of system state.

        Returns:
            Formatted string showing processes, resources, edges and matrices
        """
        output = []
        output.append("\n" + "=" * 60)
        output.append("SYSTEM STATE")
        output.append("=" * 60)

        output.append("\nProcesses:")
        for pid in self._processes:
            output.append(f"  {pid}: {self.process_state(pid).value}")

        output.append("\nResources:")
        for resource in self._resources.values():
            used = self.allocated_instances(resource.rid)
            output.append(f"  {resource.rid}: {used}/{resource.instances} used")

        assignments = ", ".join(str(e) for e in self._assignment_edges) or "None"
        requests = ", ".join(str(e) for e in self._request_edges) or "None"
        output.append(f"\nAssignments (R -> P): {assignments}")
        output.append(f"Requests (P -> R): {requests}")

        if self._processes and self._resources:
            snapshot = self.snapshot_matrices()
            header = "     " + " ".join(f"{rid:>4}" for rid in snapshot.resource_ids)
            for title, matrix in [
                ("Allocation Matrix", snapshot.allocation_matrix),
                ("Max Demand Matrix", snapshot.max_demand_matrix),
                ("Need Matrix (Max - Allocation)", snapshot.need_matrix),
            ]:
                output.append(f"\n{title}:")
                output.append(header)
                for i, pid in enumerate(snapshot.process_ids):
                    row = " ".join(f"{matrix[i][j]:4}" for j in range(snapshot.num_resources))
                    output.append(f"  {pid}: {row}")

        output.append("\n" + "=" * 60)
        return "\n".join(output)

    def assert_invariants(self, context: str = "") -> None:
        """Verify invariants I1-I4.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If an invariant is violated
        """
        for resource in self._resources.values():
            held = sum(1 for e in self._assignment_edges if e.rid == resource.rid)
            assert held <= resource.instances, (
                f"Resource bound violated for {resource.rid} {context}\n"
                f"  Holders: {held}, Instances: {resource.instances}"
            )

        assert len(set(self._assignment_edges)) == len(self._assignment_edges), (
            f"Duplicate assignment edge {context}"
        )
        assert len(set(self._request_edges)) == len(self._request_edges), (
            f"Duplicate request edge {context}"
        )

        for edge in self._request_edges:
            assert AssignmentEdge(edge.rid, edge.pid) not in self._assignment_edges, (
                f"{edge.pid} both holds and waits for {edge.rid} {context}"
            )

        for edge in list(self._assignment_edges) + list(self._request_edges):
            assert edge.pid in self._processes, f"Edge {edge} has unknown process {context}"
            assert edge.rid in self._resources, f"Edge {edge} has unknown resource {context}"
