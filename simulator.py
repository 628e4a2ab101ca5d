#!/usr/bin/env python3
"""
Resource Allocation & Deadlock Simulator
Main entry point for the simulation system.

Educational tool: processes request and release single units of reusable
resources; the wait-for graph reveals deadlocks and Banker's Algorithm
tells whether the state is safe with respect to declared maximum demand.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from models.errors import AllocationError
from models.system_state import SystemState
from utils.scenario_loader import read_scenario_file, build_scenario, ScenarioLoadError
from utils.logger import SimulatorLogger
from algorithms.request_release import handle_request, handle_release, RequestOutcome
from algorithms.detection import detect_deadlock, detect_deadlocked_processes, DeadlockResult
from algorithms.avoidance import is_safe_state, check_request_safety, SafetyResult
from analysis.events import EventLog, SimulationEvent, EventType


REQUEST_REASONS = {
    RequestOutcome.GRANTED: "resource available",
    RequestOutcome.ALREADY_HELD: "already held",
    RequestOutcome.QUEUED: "no free instance - process waits",
    RequestOutcome.ALREADY_QUEUED: "already waiting",
}


class DeadlockSimulator:
    """
    One simulation session.

    Owns the SystemState and applies user actions to it one at a time.
    Each action is one step of the history; rejected actions leave the
    state untouched, are recorded as ERROR events and re-raised.
    """

    def __init__(
        self,
        system_state: Optional[SystemState] = None,
        logger: Optional[SimulatorLogger] = None,
        event_log: Optional[EventLog] = None
    ):
        self.state = system_state if system_state is not None else SystemState()
        self.logger = logger if logger is not None else SimulatorLogger(console=False)
        self.event_log = event_log if event_log is not None else EventLog()
        self.step = 0

    def _next_step(self) -> int:
        self.step += 1
        return self.step

    def _record(self, event_type: EventType, pid: Optional[str] = None,
                rid: Optional[str] = None, message: str = "") -> None:
        self.event_log.add(SimulationEvent(
            step=self.step,
            event_type=event_type,
            process_id=pid,
            resource_id=rid,
            message=message
        ))

    def _reject(self, error: AllocationError, pid: Optional[str] = None,
                rid: Optional[str] = None) -> None:
        self.logger.log_step(self.step, f"REJECTED - {error}", "error")
        self._record(EventType.ERROR, pid, rid, str(error))

    # ------------------------------------------------------------------
    # Mutating actions
    # ------------------------------------------------------------------

    def register_process(self, pid: str) -> None:
        """Register a process (DuplicateIdError if it exists)."""
        self._next_step()
        try:
            self.state.register_process(pid)
        except AllocationError as e:
            self._reject(e, pid=pid)
            raise
        self.logger.log_step(self.step, f"Process {pid} registered")
        self._record(EventType.REGISTER_PROCESS, pid=pid)

    def register_resource(self, rid: str, instances: int) -> None:
        """Register a resource with a fixed instance count."""
        self._next_step()
        try:
            self.state.register_resource(rid, instances)
        except AllocationError as e:
            self._reject(e, rid=rid)
            raise
        self.logger.log_step(self.step, f"Resource {rid} registered ({instances} instances)")
        self._record(EventType.REGISTER_RESOURCE, rid=rid, message=f"{instances} instances")

    def request(self, pid: str, rid: str) -> RequestOutcome:
        """
        Process `pid` requests one unit of `rid`.

        Returns:
            RequestOutcome (granted immediately or queued)
        """
        self._next_step()
        try:
            outcome = handle_request(self.state, pid, rid)
        except AllocationError as e:
            self._reject(e, pid, rid)
            raise

        reason = REQUEST_REASONS[outcome]
        self.logger.log_request(self.step, pid, rid, outcome.granted, reason)
        self._record(EventType.ALLOCATION if outcome.granted else EventType.WAIT, pid, rid, reason)
        self.logger.log(f"  Free {rid}: {self.state.free_instances(rid)}", "debug")
        return outcome

    def release(self, pid: str, rid: str) -> Optional[str]:
        """
        Process `pid` releases its unit of `rid`.

        Returns:
            PID of the waiter that received the unit, or None
        """
        self._next_step()
        try:
            woken = handle_release(self.state, pid, rid)
        except AllocationError as e:
            self._reject(e, pid, rid)
            raise

        self.logger.log_release(self.step, pid, rid, woken)
        self._record(EventType.RELEASE, pid, rid)
        if woken is not None:
            self._record(EventType.WAKEUP, woken, rid, f"released by {pid}")
        return woken

    def set_max_demand(self, pid: str, rid: str, value: int) -> None:
        """Declare the maximum units of `rid` that `pid` may hold."""
        self._next_step()
        try:
            self.state.set_max_demand(pid, rid, value)
        except AllocationError as e:
            self._reject(e, pid, rid)
            raise
        self.logger.log_step(self.step, f"Max({pid}, {rid}) = {value}")
        self._record(EventType.SET_MAX, pid, rid, str(value))

    # ------------------------------------------------------------------
    # Analyses (never raise)
    # ------------------------------------------------------------------

    def check_deadlock(self) -> DeadlockResult:
        """Look for a cycle in the wait-for graph."""
        self._next_step()
        result = detect_deadlock(self.state)
        self.logger.log_deadlock(self.step, result.cycle)
        self._record(EventType.DEADLOCK, message=str(result))
        return result

    def check_safety(self) -> SafetyResult:
        """Run Banker's safety algorithm on the current state."""
        self._next_step()
        result = is_safe_state(self.state)
        self.logger.log_safety(self.step, result.safe, result.sequence, result.message)
        self.logger.log(f"  Work/Available after test: {result.available}", "debug")
        self._record(EventType.SAFETY, message=result.message)
        return result

    def check_request(self, pid: str, rid: str) -> SafetyResult:
        """Ask whether granting `rid` to `pid` would keep the state safe."""
        self._next_step()
        try:
            result = check_request_safety(self.state, pid, rid)
        except AllocationError as e:
            self._reject(e, pid, rid)
            raise
        verdict = "would stay SAFE" if result.safe else "would NOT be safe"
        self.logger.log_step(self.step, f"{pid} requesting {rid} {verdict} ({result.message})")
        self._record(EventType.SAFETY, pid, rid, result.message)
        return result

    def deadlocked_processes(self) -> List[str]:
        """All processes that can never complete (Work/Finish detection)."""
        return detect_deadlocked_processes(self.state)

    # ------------------------------------------------------------------
    # Scenario replay
    # ------------------------------------------------------------------

    def apply(self, action: Dict[str, Any]) -> Any:
        """
        Apply one scenario action.

        Args:
            action: Action dictionary validated by the scenario loader

        Returns:
            Whatever the underlying operation returns
        """
        action_type = action['type']

        if action_type == 'register_process':
            return self.register_process(action['pid'])
        elif action_type == 'register_resource':
            return self.register_resource(action['rid'], action['instances'])
        elif action_type == 'request':
            return self.request(action['pid'], action['rid'])
        elif action_type == 'release':
            return self.release(action['pid'], action['rid'])
        elif action_type == 'set_max':
            return self.set_max_demand(action['pid'], action['rid'], action['value'])
        elif action_type == 'check_deadlock':
            return self.check_deadlock()
        elif action_type == 'check_safety':
            return self.check_safety()
        elif action_type == 'check_request':
            return self.check_request(action['pid'], action['rid'])
        else:
            raise ValueError(f"Unknown action type: {action_type}")


def run_simulation(
    scenario_path: str,
    verbose: bool = False,
    log_file: Optional[str] = None,
    final_check: str = "both",
    console: bool = True
) -> Optional[EventLog]:
    """
    Replay a scenario file through a fresh simulation session.

    Actions are applied in file order. A rejected action is logged and
    the replay continues with the next one.

    Args:
        scenario_path: Path to scenario JSON file
        verbose: Enable debug logging (state dumps, work vectors)
        log_file: Optional path for a copy of the log
        final_check: 'deadlock', 'safety', 'both' or 'none' after the last action
        console: Echo log lines to stdout

    Returns:
        EventLog containing all simulation events, or None if the
        scenario could not be loaded
    """
    logger = SimulatorLogger(verbose=verbose, log_file=log_file, console=console)
    event_log = EventLog()

    try:
        data = read_scenario_file(scenario_path)
        system_state, actions = build_scenario(data)
    except ScenarioLoadError as e:
        logger.log(f"Failed to load scenario: {e}", "error")
        logger.close()
        return None

    logger.log(f"\n{'=' * 60}")
    logger.log("SIMULATION START")
    logger.log(f"Scenario: {scenario_path}")
    description = data.get('description', '')
    if description:
        logger.log(description)
    logger.log(f"{'=' * 60}\n")

    simulator = DeadlockSimulator(system_state, logger, event_log)
    logger.log_system_state(0, system_state.display())

    for action in actions:
        try:
            simulator.apply(action)
        except AllocationError:
            # Already logged and recorded by the simulator
            continue
        finally:
            system_state.assert_invariants(f"after step {simulator.step}")
        logger.log_system_state(simulator.step, system_state.display())

    if final_check in ("deadlock", "both"):
        simulator.check_deadlock()
        stuck = simulator.deadlocked_processes()
        if stuck:
            logger.log(f"  Processes that can never complete: {stuck}", "debug")
    if final_check in ("safety", "both"):
        simulator.check_safety()

    logger.log(f"\n{'=' * 60}")
    logger.log("SIMULATION COMPLETE")
    logger.log(f"{'=' * 60}\n")

    _display_statistics(system_state, event_log, logger)

    logger.close()
    return event_log


def _display_statistics(system_state: SystemState, event_log: EventLog, logger: SimulatorLogger) -> None:
    """Display final simulation statistics."""
    logger.log("Simulation Statistics:")
    logger.log(f"  Processes: {system_state.num_processes}")
    logger.log(f"  Resources: {system_state.num_resources}")
    logger.log(f"  Assignments held: {len(system_state.assignment_edges)}")
    logger.log(f"  Requests pending: {len(system_state.request_edges)}")

    grants = len(event_log.get_events_by_type(EventType.ALLOCATION))
    waits = len(event_log.get_events_by_type(EventType.WAIT))
    wakeups = len(event_log.get_events_by_type(EventType.WAKEUP))
    errors = len(event_log.get_events_by_type(EventType.ERROR))

    logger.log(f"\n  Immediate grants: {grants}")
    logger.log(f"  Requests queued: {waits}")
    logger.log(f"  Waiters woken on release: {wakeups}")
    logger.log(f"  Rejected actions: {errors}")

    for pid in system_state.processes:
        waits_for_pid = sum(1 for e in event_log.get_events_for_process(pid) if e.event_type == EventType.WAIT)
        if waits_for_pid:
            logger.log(f"  {pid} waited {waits_for_pid} time(s)", "debug")

    logger.log("\nEvent history:", "debug")
    logger.log(event_log.display(), "debug")


def main():
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description='Resource Allocation & Deadlock Simulator'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        required=True,
        help='Path to scenario JSON file'
    )
    parser.add_argument(
        '--check',
        choices=['deadlock', 'safety', 'both', 'none'],
        default='both',
        help='Analyses to run after the last action (default: both)'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    event_log = run_simulation(args.scenario, args.verbose, args.log_file, args.check)
    return 0 if event_log is not None else 1


if __name__ == '__main__':
    sys.exit(main())
