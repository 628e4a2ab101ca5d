"""
Edge records of the resource-allocation graph.
"""

from typing import NamedTuple


class AssignmentEdge(NamedTuple):
    """One unit of resource `rid` is held by process `pid` (R -> P)."""
    rid: str
    pid: str

    def __str__(self) -> str:
        return f"{self.rid} -> {self.pid}"


class RequestEdge(NamedTuple):
    """Process `pid` is blocked waiting for one unit of `rid` (P -> R)."""
    pid: str
    rid: str

    def __str__(self) -> str:
        return f"{self.pid} -> {self.rid}"
