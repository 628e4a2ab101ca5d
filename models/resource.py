"""
Resource model for the Resource Allocation & Deadlock Simulator.

Represents a reusable resource with a fixed number of identical instances.
"""

from dataclasses import dataclass

from models.errors import InvalidInstanceCountError


@dataclass(frozen=True)
class Resource:
    """
    Represents a resource in the simulation.

    Attributes:
        rid: Resource identifier (unique string)
        instances: Total number of instances, fixed at creation

    Invariant:
        instances >= 1
    """
    rid: str
    instances: int

    def __post_init__(self):
        """Validate instance count."""
        # bool is an int subclass; True must not pass as one instance
        if isinstance(self.instances, bool) or not isinstance(self.instances, int):
            raise InvalidInstanceCountError(self.rid, self.instances)
        if self.instances < 1:
            raise InvalidInstanceCountError(self.rid, self.instances)
