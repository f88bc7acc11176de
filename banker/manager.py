"""
Resource Manager: Banker's Algorithm allocation engine.

Owns the resource pool and the registry of allocation records, and grants
a request only when the resulting state is proven safe.
"""

import threading
from typing import Dict, Iterable, List, Optional, Union

import numpy as np

from banker.algorithms.avoidance import (
    RequestResult,
    evaluate_request,
    is_safe_state,
)
from banker.analysis.events import EventLog, EventType
from banker.errors import (
    CapacityExceeded,
    DemandVectorSizeMismatch,
    DuplicateProcess,
    InvalidAmount,
    NegativeAmount,
    UnknownProcess,
)
from banker.models.process import AllocationRecord
from banker.models.resource import ResourceKind, ResourcePool
from banker.models.system_state import ProcessReport, SystemReport, SystemSnapshot
from banker.utils.logger import ManagerLogger


class ResourceManager:
    """
    Grants or denies resource requests so the system never deadlocks.

    Every public operation runs under one re-entrant lock: the safety
    simulation needs a consistent view of all records, so no mutation may
    interleave with it.

    Attributes:
        pool: Resource pool (source of truth for capacity)
        event_log: One event per register/request/release
        logger: Decision logger
    """

    def __init__(
        self,
        pool: Union[ResourcePool, Iterable[ResourceKind]],
        logger: Optional[ManagerLogger] = None,
        event_log: Optional[EventLog] = None
    ):
        self.pool = pool if isinstance(pool, ResourcePool) else ResourcePool(pool)
        # Nothing is held before the first registration, so used must be zero
        for kind in self.pool:
            if kind.used != 0:
                raise ValueError(
                    f"Resource {kind.name} already has {kind.used} units in use; "
                    f"a manager must start from an unused pool"
                )
        self.logger = logger or ManagerLogger(quiet=True)
        self.event_log = event_log if event_log is not None else EventLog()
        # Insertion order is the snapshot row order
        self._records: Dict[str, AllocationRecord] = {}
        self._lock = threading.RLock()

    @classmethod
    def with_totals(cls, totals: dict, **kwargs) -> "ResourceManager":
        """Create a manager over kinds given as an ordered {name: total} mapping."""
        return cls(ResourcePool.from_totals(totals), **kwargs)

    @property
    def num_processes(self) -> int:
        return len(self._records)

    def list_kinds(self) -> List[str]:
        """Ordered kind names; this order indexes every vector."""
        return self.pool.list_kinds()

    def has_process(self, process_id: str) -> bool:
        with self._lock:
            return process_id in self._records

    def record(self, process_id: str) -> ProcessReport:
        """
        Get a read-only copy of a process's allocation.

        Raises:
            UnknownProcess: If the process is not registered
        """
        with self._lock:
            return ProcessReport.from_record(self._live_record(process_id))

    def register(self, process_id: str, max_demand) -> ProcessReport:
        """
        Register a process with its maximum future demand.

        Nothing is reserved: max_demand is a ceiling for later requests.

        Args:
            process_id: Unique process identifier
            max_demand: Maximum units per kind [K]

        Returns:
            Report of the new record (held all zero)

        Raises:
            DuplicateProcess: If process_id is already registered
            InvalidAmount: If max_demand is not a sequence of integers
            DemandVectorSizeMismatch: If max_demand length != kind count
            NegativeAmount: If any entry is negative
            CapacityExceeded: If any entry exceeds the kind's total
        """
        with self._lock:
            if process_id in self._records:
                raise DuplicateProcess(process_id)
            demand = self._validate_vector(max_demand, "max_demand")

            for kind, amount in zip(self.pool, demand):
                if amount > kind.total:
                    raise CapacityExceeded(kind.name, amount, kind.total)

            record = AllocationRecord(process_id=process_id, max_demand=demand)
            self._records[process_id] = record

            self.logger.log_register(process_id, demand)
            self.event_log.record(EventType.REGISTER, process_id, demand)
            return ProcessReport.from_record(record)

    def request(self, process_id: str, amounts) -> RequestResult:
        """
        Request additional units for a registered process.

        The request is applied to a private snapshot and only committed if
        the safety simulation proves every process can still finish. A
        denial leaves the pool and every record untouched.

        Args:
            process_id: Requesting process
            amounts: Units requested per kind [K]

        Returns:
            RequestResult (GRANTED or DENIED)

        Raises:
            UnknownProcess: If the process is not registered
            InvalidAmount: If amounts is not a sequence of integers
            DemandVectorSizeMismatch: If amounts length != kind count
            NegativeAmount: If any entry is negative
        """
        with self._lock:
            record = self._live_record(process_id)
            requested = self._validate_vector(amounts, "request")

            result = evaluate_request(
                record, requested, self.pool, list(self._records.values())
            )

            if result.granted:
                self._commit(record, requested)
                self.assert_resource_conservation(
                    f"after granting {requested} to {process_id}"
                )
                self.event_log.record(
                    EventType.ALLOCATION, process_id, requested, message=result.message
                )
            else:
                self.event_log.record(
                    EventType.DENIAL,
                    process_id,
                    requested,
                    message=result.message,
                    reason=result.reason.value,
                )

            self.logger.log_request(process_id, requested, result.granted, result.message)
            if self.logger.verbose:
                self.logger.log(f"  Available now: {self.pool.available_vector().tolist()}", "debug")
            return result

    def release(self, process_id: str) -> List[int]:
        """
        Destroy a process and return everything it holds to the pool.

        Always succeeds for a registered process and never runs a safety
        check: releasing units can only move the system toward safety.

        Returns:
            Units returned per kind

        Raises:
            UnknownProcess: If the process is not registered
        """
        with self._lock:
            record = self._live_record(process_id)
            held = record.held.copy()

            for index, amount in enumerate(held):
                if amount:
                    self.pool.commit_use(index, -amount)
            released = record.release_all()
            del self._records[process_id]

            self.assert_resource_conservation(f"after releasing {process_id}")
            self.logger.log_release(process_id, released)
            self.event_log.record(EventType.RELEASE, process_id, released)
            return released

    def snapshot(self) -> SystemReport:
        """Read-only view of the pool and every live record."""
        with self._lock:
            return SystemReport.build(self.pool, self._records.values())

    def describe(self) -> str:
        """Text tables of the current state."""
        return self.snapshot().display()

    def is_safe(self) -> bool:
        """Run the safety simulation against the committed state."""
        with self._lock:
            safe, _ = is_safe_state(SystemSnapshot.build(self.pool, self._records.values()))
            return safe

    def safe_sequence(self) -> Optional[List[str]]:
        """Safe completion order of the committed state, or None if unsafe."""
        with self._lock:
            _, sequence = is_safe_state(SystemSnapshot.build(self.pool, self._records.values()))
            return sequence

    def assert_resource_conservation(self, context: str = "") -> None:
        """
        Verify resource conservation: sum(held[:, k]) == used[k] for all kinds,
        and 0 <= held <= max_demand for every record.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If any invariant is violated
        """
        with self._lock:
            for index, kind in enumerate(self.pool):
                held_total = sum(r.held[index] for r in self._records.values())
                assert held_total == kind.used, (
                    f"Resource conservation violated for {kind.name} {context}\n"
                    f"  Held by processes: {held_total}, Used: {kind.used}"
                )
                assert 0 <= kind.available <= kind.total, (
                    f"Available out of range for {kind.name} {context}\n"
                    f"  Available: {kind.available}, Total: {kind.total}"
                )
            for record in self._records.values():
                assert all(0 <= h <= m for h, m in zip(record.held, record.max_demand)), (
                    f"Held outside [0, max_demand] for {record.process_id} {context}\n"
                    f"  Held: {record.held}, Max: {record.max_demand}"
                )

    def _live_record(self, process_id: str) -> AllocationRecord:
        if process_id not in self._records:
            raise UnknownProcess(process_id)
        return self._records[process_id]

    def _commit(self, record: AllocationRecord, amounts: List[int]) -> None:
        for index, amount in enumerate(amounts):
            if amount:
                self.pool.commit_use(index, amount)
        record.allocate(amounts)

    def _validate_vector(self, values, what: str) -> List[int]:
        if isinstance(values, (str, bytes)):
            raise InvalidAmount(values, what)
        try:
            values = list(values)
        except TypeError:
            raise InvalidAmount(values, what) from None
        for v in values:
            # bool is an int subclass but never a unit count
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                raise InvalidAmount(v, what)
        values = [int(v) for v in values]
        if len(values) != self.pool.num_kinds:
            raise DemandVectorSizeMismatch(self.pool.num_kinds, len(values), what)
        for name, amount in zip(self.pool.list_kinds(), values):
            if amount < 0:
                raise NegativeAmount(name, amount, what)
        return values
