"""
System State model for the Banker's Algorithm Resource Manager.

Holds the matrices and vectors required by the safety simulation, and the
read-only report handed to presentation code.
"""

import numpy as np
from typing import List, Iterable, Optional, Tuple
from dataclasses import dataclass, field

from banker.models.process import AllocationRecord
from banker.models.resource import ResourcePool


@dataclass
class SystemSnapshot:
    """
    Private copy of the whole system for one safety simulation.

    Every array is built fresh from the live pool and records, so the
    simulation can mutate it freely and the snapshot is discarded afterwards.

    Attributes:
        process_ids: Row labels in registration order [P]
        available: Free units per kind [K]
        held: [P][K] Units held by each process
        need: [P][K] Max - Held for each process
        finished: [P] Whether the simulation has reclaimed the process
    """
    process_ids: List[str]
    available: np.ndarray
    held: np.ndarray
    need: np.ndarray
    finished: Optional[np.ndarray] = None

    def __post_init__(self):
        if self.finished is None:
            self.finished = np.zeros(len(self.process_ids), dtype=bool)

    @classmethod
    def build(cls, pool: ResourcePool, records: Iterable[AllocationRecord]) -> "SystemSnapshot":
        """Deep-copy live state into a new snapshot."""
        records = list(records)
        num_kinds = pool.num_kinds

        held = np.zeros((len(records), num_kinds), dtype=int)
        max_demand = np.zeros((len(records), num_kinds), dtype=int)
        for i, record in enumerate(records):
            held[i] = record.held
            max_demand[i] = record.max_demand

        return cls(
            process_ids=[r.process_id for r in records],
            available=pool.available_vector(),
            held=held,
            need=max_demand - held,
        )

    @property
    def num_processes(self) -> int:
        return len(self.process_ids)

    @property
    def num_kinds(self) -> int:
        return len(self.available)

    def row_of(self, process_id: str) -> int:
        return self.process_ids.index(process_id)

    def apply_request(self, process_id: str, amounts) -> None:
        """
        Tentatively grant a request inside this snapshot only.

        Available -= amounts, Held[p] += amounts, Need[p] -= amounts
        """
        amounts = np.asarray(amounts, dtype=int)
        row = self.row_of(process_id)
        self.available -= amounts
        self.held[row] += amounts
        self.need[row] -= amounts


@dataclass(frozen=True)
class KindReport:
    """Capacity of one resource kind at report time."""
    name: str
    total: int
    used: int
    available: int


@dataclass(frozen=True)
class ProcessReport:
    """Allocation of one live process at report time."""
    process_id: str
    max_demand: Tuple[int, ...]
    held: Tuple[int, ...]
    need: Tuple[int, ...]

    @classmethod
    def from_record(cls, record: AllocationRecord) -> "ProcessReport":
        return cls(
            process_id=record.process_id,
            max_demand=tuple(record.max_demand),
            held=tuple(record.held),
            need=tuple(record.need),
        )


@dataclass(frozen=True)
class SystemReport:
    """
    Read-only view of the pool and every live allocation record.

    Built from copies, so holding on to a report never observes later
    changes and comparing two reports compares values.
    """
    kinds: Tuple[KindReport, ...] = field(default_factory=tuple)
    processes: Tuple[ProcessReport, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, pool: ResourcePool, records: Iterable[AllocationRecord]) -> "SystemReport":
        return cls(
            kinds=tuple(
                KindReport(name=k.name, total=k.total, used=k.used, available=k.available)
                for k in pool
            ),
            processes=tuple(ProcessReport.from_record(r) for r in records),
        )

    @property
    def kind_names(self) -> List[str]:
        return [k.name for k in self.kinds]

    @property
    def available(self) -> List[int]:
        return [k.available for k in self.kinds]

    def process(self, process_id: str) -> ProcessReport:
        for p in self.processes:
            if p.process_id == process_id:
                return p
        raise KeyError(process_id)

    def display(self) -> str:
        """
        Generate readable tables of the pool and allocation records.

        Returns:
            Formatted string showing kinds and Max/Held/Need matrices
        """
        names = self.kind_names
        header = "          " + " ".join(f"{name:>5}" for name in names)

        output = []
        output.append("\n" + "=" * 60)
        output.append("RESOURCE POOL")
        output.append("=" * 60)
        output.append(f"  {'Kind':<8} {'Total':>6} {'Used':>6} {'Avail':>6}")
        for k in self.kinds:
            output.append(f"  {k.name:<8} {k.total:>6} {k.used:>6} {k.available:>6}")

        if not self.processes:
            output.append("\nNo registered processes")
        else:
            for title, attr in (
                ("Max Demand Matrix", "max_demand"),
                ("Held Matrix", "held"),
                ("Need Matrix (Max - Held)", "need"),
            ):
                output.append(f"\n{title}:")
                output.append(header)
                for p in self.processes:
                    row = " ".join(f"{v:>5}" for v in getattr(p, attr))
                    output.append(f"  {p.process_id:<8}{row}")

        output.append("\n" + "=" * 60)
        return "\n".join(output)
