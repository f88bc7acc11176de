"""
Logger utility for the Banker's Algorithm Resource Manager.

Provides decision logging with verbosity levels.
"""

from typing import Optional, TextIO
from datetime import datetime
import sys


class ManagerLogger:
    """
    Logger for manager operations and decisions.

    Format: "P1 requests [2, 1, 2] - GRANTED/DENIED (reason)"
    """

    def __init__(
        self,
        verbose: bool = False,
        log_file: Optional[str] = None,
        stream: Optional[TextIO] = None,
        quiet: bool = False
    ):
        """
        Initialize logger.

        Args:
            verbose: Enable debug output
            log_file: Optional file path for logging
            stream: Console stream (defaults to stdout)
            quiet: Suppress console output (file output still written)
        """
        self.verbose = verbose
        self.log_file = log_file
        self.stream = stream
        self.quiet = quiet
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Resource Manager Log - {timestamp}\n")
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

        if not self.quiet:
            print(formatted, file=self.stream or sys.stdout)

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

    def log_register(self, process_id: str, max_demand: list) -> None:
        self.log(f"{process_id} registered (max_demand={list(max_demand)})")

    def log_request(
        self,
        process_id: str,
        amounts: list,
        granted: bool,
        reason: str
    ) -> None:
        """
        Log a resource request decision.

        Args:
            process_id: Process ID
            amounts: Units requested per kind
            granted: Whether request was granted
            reason: Reason for decision
        """
        status = "GRANTED" if granted else "DENIED"
        self.log(f"{process_id} requests {list(amounts)} - {status} ({reason})")

    def log_release(self, process_id: str, released: list) -> None:
        """
        Log a process release.

        Args:
            process_id: Released process
            released: Units returned per kind
        """
        self.log(f"{process_id} released {list(released)}")

    def log_system_state(self, state_str: str) -> None:
        """
        Log system state snapshot.

        Args:
            state_str: Formatted system state
        """
        if self.verbose:
            self.log(f"System State:\n{state_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
