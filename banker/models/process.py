"""
Process model for the Banker's Algorithm Resource Manager.

Represents a live process's allocation record: its declared ceiling and
what it currently holds.
"""

from dataclasses import dataclass, field
from typing import List
from enum import Enum


class ProcessState(Enum):
    """Lifecycle of an allocation record."""
    REGISTERED = "REGISTERED"
    RELEASED = "RELEASED"


@dataclass
class AllocationRecord:
    """
    Allocation record for one live process.

    Attributes:
        process_id: Unique process identifier
        max_demand: Maximum units per kind declared at registration [K]
        held: Units per kind currently held [K]
        state: Lifecycle state
    """
    process_id: str
    max_demand: List[int]
    held: List[int] = field(default_factory=list)
    state: ProcessState = ProcessState.REGISTERED

    def __post_init__(self):
        """Initialize held vector if not provided."""
        self.max_demand = list(self.max_demand)
        if not self.held:
            self.held = [0] * len(self.max_demand)
        else:
            self.held = list(self.held)

    @property
    def need(self) -> List[int]:
        """Remaining units per kind before the declared ceiling: Max - Held."""
        return [m - h for m, h in zip(self.max_demand, self.held)]

    def within_need(self, amounts: List[int]) -> bool:
        """
        Check that a request stays within the declared ceiling.

        Returns:
            True if held + amounts <= max_demand for every kind
        """
        return all(a <= n for a, n in zip(amounts, self.need))

    def allocate(self, amounts: List[int]) -> None:
        """
        Add a committed grant to this record.

        Raises:
            ValueError: If the grant would exceed max_demand
        """
        if not self.within_need(amounts):
            raise ValueError(
                f"{self.process_id}: cannot allocate {list(amounts)} - "
                f"would exceed max_demand {self.max_demand} (held {self.held})"
            )
        self.held = [h + a for h, a in zip(self.held, amounts)]

    def release_all(self) -> List[int]:
        """
        Return everything held and mark the record released.

        Returns:
            List of released amounts by kind
        """
        released = self.held.copy()
        self.held = [0] * len(self.held)
        self.state = ProcessState.RELEASED
        return released

    def holds_nothing(self) -> bool:
        return not any(self.held)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"AllocationRecord(id={self.process_id}, state={self.state.value}, "
            f"held={self.held}, max={self.max_demand})"
        )
