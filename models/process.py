"""
Process model for the Resource Allocation & Deadlock Simulator.

A process is identified by its id only; what it holds and what it waits
for lives in the edge collections of SystemState.
"""

from dataclasses import dataclass
from enum import Enum


class ProcessState(Enum):
    """Derived process states, as shown by SystemState.display()."""
    IDLE = "IDLE"
    HOLDING = "HOLDING"
    WAITING = "WAITING"


@dataclass(frozen=True)
class Process:
    """
    Represents a registered process.

    Attributes:
        pid: Process identifier (unique string)
    """
    pid: str

    def __repr__(self) -> str:
        return f"Process(pid={self.pid})"
