"""
Logger utility for the Resource Allocation & Deadlock Simulator.

Provides step-by-step logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for simulation actions and analysis results.

    Format: "Step X: P1 requests R1 - GRANTED/WAITING (reason)"
    """

    def __init__(
        self,
        verbose: bool = False,
        log_file: Optional[str] = None,
        console: bool = True
    ):
        """
        Initialize logger.

        Args:
            verbose: Enable debug output
            log_file: Optional file path for logging
            console: Echo messages to stdout
        """
        self.verbose = verbose
        self.log_file = log_file
        self.console = console
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Simulation Log - {timestamp}\n")
            self.file_handle.write("=" * 60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        if self.console:
            print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_step(self, step: int, message: str, level: str = "info") -> None:
        """Log a simulation step message."""
        self.log(f"Step {step}: {message}", level)

    def log_request(self, step: int, pid: str, rid: str, granted: bool, reason: str) -> None:
        """
        Log a resource request.

        Args:
            step: Current action number
            pid: Requesting process
            rid: Requested resource
            granted: Whether the process holds the resource afterwards
            reason: Explanation of the decision
        """
        status = "GRANTED" if granted else "WAITING"
        self.log_step(step, f"{pid} requests {rid} - {status} ({reason})")

    def log_release(self, step: int, pid: str, rid: str, woken: Optional[str]) -> None:
        """Log a release and the waiter it woke, if any."""
        message = f"{pid} releases {rid}"
        if woken is not None:
            message += f" - granted to waiting {woken}"
        self.log_step(step, message)

    def log_deadlock(self, step: int, cycle: List[str]) -> None:
        """
        Log the outcome of deadlock detection.

        Args:
            step: Current action number
            cycle: Closed walk of process ids, empty if no deadlock
        """
        if cycle:
            self.log_step(step, f"DEADLOCK DETECTED - Cycle: {' -> '.join(cycle)}", "warning")
        else:
            self.log_step(step, "No deadlock. System is deadlock-free.")

    def log_safety(self, step: int, safe: bool, sequence: List[str], message: str) -> None:
        """Log the outcome of Banker's safety check."""
        if safe:
            order = " -> ".join(sequence) if sequence else "(empty)"
            self.log_step(step, f"SAFE state - sequence: {order}")
        else:
            self.log_step(step, f"NOT safe - {message}", "warning")

    def log_system_state(self, step: int, state_str: str) -> None:
        """
        Log system state snapshot.

        Args:
            step: Current action number
            state_str: Formatted system state
        """
        if self.verbose:
            self.log_step(step, f"System State:\n{state_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
