"""
Error kinds for the Resource Allocation & Deadlock Simulator.

Every mutating operation validates its input before touching the state,
so raising one of these always leaves the state unchanged.
"""


class AllocationError(ValueError):
    """Base class for rejected actions on the allocation state."""
    pass


class DuplicateIdError(AllocationError):
    """A process or resource with this id is already registered."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} already exists")


class InvalidInstanceCountError(AllocationError):
    """Resource instance count is not a positive integer."""

    def __init__(self, rid: str, instances):
        self.rid = rid
        self.instances = instances
        super().__init__(
            f"Resource {rid}: instances must be an integer >= 1 (got {instances!r})"
        )


class UnknownProcessError(AllocationError):
    """Action refers to a process that was never registered."""

    def __init__(self, pid: str):
        self.pid = pid
        super().__init__(f"Unknown process {pid}")


class UnknownResourceError(AllocationError):
    """Action refers to a resource that was never registered."""

    def __init__(self, rid: str):
        self.rid = rid
        super().__init__(f"Unknown resource {rid}")


class NotHeldError(AllocationError):
    """Release of a resource the process does not hold."""

    def __init__(self, pid: str, rid: str):
        self.pid = pid
        self.rid = rid
        super().__init__(f"Process {pid} does not hold resource {rid}")


class InvalidValueError(AllocationError):
    """Declared maximum demand is not a non-negative integer."""

    def __init__(self, pid: str, rid: str, value):
        self.pid = pid
        self.rid = rid
        self.value = value
        super().__init__(
            f"Max demand for ({pid}, {rid}) must be an integer >= 0 (got {value!r})"
        )
