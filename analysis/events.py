"""
Event Model for the Resource Allocation & Deadlock Simulator.

Every user action is one step of a single linear history; the facade
records one or more events per step.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(Enum):
    """Types of events in the simulation."""
    REGISTER_PROCESS = "register_process"
    REGISTER_RESOURCE = "register_resource"
    ALLOCATION = "allocation"
    WAIT = "wait"
    RELEASE = "release"
    WAKEUP = "wakeup"
    SET_MAX = "set_max"
    DEADLOCK = "deadlock"
    SAFETY = "safety"
    ERROR = "error"


@dataclass
class SimulationEvent:
    """
    Represents a single event in the simulation.

    Attributes:
        step: Action number that produced the event
        event_type: Type of event
        process_id: Process involved (if applicable)
        resource_id: Resource involved (if applicable)
        message: Human-readable description
    """
    step: int
    event_type: EventType
    process_id: Optional[str] = None
    resource_id: Optional[str] = None
    message: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"Step {self.step}:"

        if self.event_type == EventType.ALLOCATION:
            return f"{base} {self.process_id} requests {self.resource_id} - GRANTED ({self.message})"
        elif self.event_type == EventType.WAIT:
            return f"{base} {self.process_id} requests {self.resource_id} - WAITING ({self.message})"
        elif self.event_type == EventType.RELEASE:
            return f"{base} {self.process_id} releases {self.resource_id}"
        elif self.event_type == EventType.WAKEUP:
            return f"{base} {self.resource_id} handed to waiting {self.process_id}"
        elif self.event_type == EventType.DEADLOCK:
            return f"{base} DEADLOCK CHECK ({self.message})"
        elif self.event_type == EventType.SAFETY:
            return f"{base} SAFETY CHECK ({self.message})"
        elif self.event_type == EventType.ERROR:
            return f"{base} REJECTED ({self.message})"
        else:
            return f"{base} {self.event_type.value}: {self.message}"


@dataclass
class EventLog:
    """Collection of simulation events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: SimulationEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_step(self, step: int) -> list:
        """Get all events from a specific step."""
        return [e for e in self.events if e.step == step]

    def get_events_for_process(self, pid: str) -> list:
        """Get all events involving a process."""
        return [e for e in self.events if e.process_id == pid]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
