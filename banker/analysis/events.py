"""
Event Model for the Banker's Algorithm Resource Manager.

Defines event types for tracking manager operations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class EventType(Enum):
    """Types of events recorded by the manager."""
    REGISTER = "register"
    ALLOCATION = "allocation"
    DENIAL = "denial"
    RELEASE = "release"


@dataclass
class ManagerEvent:
    """
    Represents a single manager operation.

    Attributes:
        seq: Position of the event in the log
        event_type: Type of event
        process_id: Process involved in event
        amounts: Units per kind involved (demand, request or released vector)
        message: Human-readable description
        reason: Reason for denial (if applicable)
    """
    seq: int
    event_type: EventType
    process_id: str
    amounts: Optional[Tuple[int, ...]] = None
    message: str = ""
    reason: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"#{self.seq}: {self.process_id}"
        amounts = list(self.amounts) if self.amounts is not None else []

        if self.event_type == EventType.REGISTER:
            return f"{base} registered with max_demand {amounts}"
        elif self.event_type == EventType.ALLOCATION:
            return f"{base} requests {amounts} - GRANTED ({self.message})"
        elif self.event_type == EventType.DENIAL:
            return f"{base} requests {amounts} - DENIED ({self.message})"
        elif self.event_type == EventType.RELEASE:
            return f"{base} released {amounts}"
        else:
            return f"{base} - {self.event_type.value}: {self.message}"


@dataclass
class EventLog:
    """Collection of manager events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def record(
        self,
        event_type: EventType,
        process_id: str,
        amounts=None,
        message: str = "",
        reason: str = ""
    ) -> ManagerEvent:
        """Append a new event numbered after the last one."""
        event = ManagerEvent(
            seq=len(self.events) + 1,
            event_type=event_type,
            process_id=process_id,
            amounts=tuple(amounts) if amounts is not None else None,
            message=message,
            reason=reason,
        )
        self.events.append(event)
        return event

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_process(self, process_id: str) -> list:
        """Get all events for a specific process."""
        return [e for e in self.events if e.process_id == process_id]

    def __len__(self) -> int:
        return len(self.events)

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
