"""
Request/Release protocol for the Resource Allocation & Deadlock Simulator.

Each request or release asks for or returns exactly one unit. A request is
granted immediately when a unit is free, otherwise the process is queued
(a request edge). A release hands the freed unit to the earliest queued
requester, if any.

Both operations validate everything first and mutate afterwards, so a
rejected action leaves the state exactly as it was.
"""

from enum import Enum
from typing import Optional

from models.errors import NotHeldError
from models.system_state import SystemState


class RequestOutcome(Enum):
    """Result of a single request action."""
    GRANTED = "granted"
    ALREADY_HELD = "already_held"
    QUEUED = "queued"
    ALREADY_QUEUED = "already_queued"

    @property
    def granted(self) -> bool:
        """True when the process holds the resource after the request."""
        return self in (RequestOutcome.GRANTED, RequestOutcome.ALREADY_HELD)


def handle_request(system_state: SystemState, pid: str, rid: str) -> RequestOutcome:
    """
    Process `pid` asks for one unit of `rid`.

    Steps:
    1. Validate both ids
    2. free = instances(rid) - holders(rid)
    3. free > 0: add assignment edge (no-op if already held), drop any
       pending request edge for the pair
    4. free == 0: add request edge unless already queued; the process blocks

    Args:
        system_state: State to mutate
        pid: Requesting process
        rid: Requested resource

    Returns:
        RequestOutcome describing what happened

    Raises:
        UnknownProcessError: If pid is not registered
        UnknownResourceError: If rid is not registered
    """
    system_state.require_process(pid)
    system_state.require_resource(rid)

    if system_state.holds(pid, rid):
        return RequestOutcome.ALREADY_HELD

    if system_state.free_instances(rid) > 0:
        if system_state.is_waiting(pid, rid):
            system_state.remove_request(pid, rid)
        system_state.add_assignment(rid, pid)
        return RequestOutcome.GRANTED

    if system_state.is_waiting(pid, rid):
        return RequestOutcome.ALREADY_QUEUED

    system_state.add_request(pid, rid)
    return RequestOutcome.QUEUED


def handle_release(system_state: SystemState, pid: str, rid: str) -> Optional[str]:
    """
    Process `pid` returns its unit of `rid`.

    The freed unit goes to the earliest queued requester for `rid`. Only
    one waiter is woken per release, even if more units are free.

    Args:
        system_state: State to mutate
        pid: Releasing process
        rid: Released resource

    Returns:
        PID of the woken waiter, or None if nobody was queued

    Raises:
        UnknownProcessError: If pid is not registered
        UnknownResourceError: If rid is not registered
        NotHeldError: If pid does not hold rid
    """
    system_state.require_process(pid)
    system_state.require_resource(rid)
    if not system_state.holds(pid, rid):
        raise NotHeldError(pid, rid)

    system_state.remove_assignment(rid, pid)

    waiters = system_state.waiters_for(rid)
    if not waiters:
        return None

    next_pid = waiters[0]
    system_state.remove_request(next_pid, rid)
    system_state.add_assignment(rid, next_pid)
    return next_pid
