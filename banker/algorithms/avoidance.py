"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Resource Manager.

Decides whether a request keeps the system in a safe state. Everything in
this module works on a SystemSnapshot; live state is never touched here.
"""

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from banker.models.process import AllocationRecord
from banker.models.resource import ResourcePool
from banker.models.system_state import SystemSnapshot


class RequestOutcome(Enum):
    """Decision for a single request."""
    GRANTED = "GRANTED"
    DENIED = "DENIED"


class DenialReason(Enum):
    """Why a request was denied."""
    INSUFFICIENT_AVAILABLE = "insufficient_available"
    EXCEEDS_NEED = "exceeds_need"
    UNSAFE_STATE = "unsafe_state"


@dataclass(frozen=True)
class RequestResult:
    """
    Tagged result of a request.

    Attributes:
        process_id: Requesting process
        amounts: Requested units per kind
        outcome: GRANTED or DENIED
        reason: Why the request was denied (None when granted)
        safe_sequence: Order in which all processes can finish (granted only)
        message: Human-readable explanation
    """
    process_id: str
    amounts: Tuple[int, ...]
    outcome: RequestOutcome
    reason: Optional[DenialReason] = None
    safe_sequence: Tuple[str, ...] = field(default_factory=tuple)
    message: str = ""

    @property
    def granted(self) -> bool:
        return self.outcome is RequestOutcome.GRANTED

    @property
    def denied(self) -> bool:
        return self.outcome is RequestOutcome.DENIED

    def __str__(self) -> str:
        return f"{self.outcome.value} ({self.message})"


def is_safe_state(snapshot: SystemSnapshot) -> Tuple[bool, Optional[List[str]]]:
    """
    Check if a snapshot is in a safe state using Banker's Algorithm.

    Algorithm:
    1. Work = snapshot.available, Finish = snapshot.finished
    2. Find the lowest-indexed process i where Finish[i] == False and Need[i] <= Work
    3. If found: Finish[i] = True, Work += Held[i], add id to sequence
    4. Repeat step 2 until all processes finish (SAFE) or stuck (UNSAFE)

    The snapshot's available and finished vectors are consumed by the run,
    so a snapshot is good for one simulation only.

    Time Complexity: O(P²×K)

    Args:
        snapshot: Private copy of system state

    Returns:
        Tuple of (is_safe, safe_sequence if exists else None)

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 8.6: Deadlock Avoidance.
    """
    work = snapshot.available
    finish = snapshot.finished
    safe_sequence = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i in range(snapshot.num_processes):
            if finish[i]:
                continue

            if np.all(snapshot.need[i] <= work):
                # Process can finish: reclaim its allocation
                work += snapshot.held[i]
                finish[i] = True
                safe_sequence.append(snapshot.process_ids[i])
                made_progress = True
                break  # Restart from the lowest index

    if bool(np.all(finish)):
        return True, safe_sequence
    return False, None


def evaluate_request(
    record: AllocationRecord,
    amounts: List[int],
    pool: ResourcePool,
    records: List[AllocationRecord]
) -> RequestResult:
    """
    Decide a request without committing it.

    Steps:
    1. Check: request <= available (otherwise DENIED, insufficient)
    2. Validate: request <= need (otherwise DENIED, exceeds need)
    3. Build a snapshot and tentatively apply the request to it
    4. Run safety algorithm on the snapshot
    5. GRANTED with the safe sequence, or DENIED as unsafe

    Args:
        record: Allocation record of the requesting process
        amounts: Units requested per kind (already validated for shape and sign)
        pool: Live resource pool (read only)
        records: All live allocation records in registration order (read only)

    Returns:
        RequestResult describing the decision
    """
    pid = record.process_id
    requested = tuple(int(a) for a in amounts)

    # Step 1: Request cannot exceed free capacity
    available = pool.available_vector()
    short = [
        f"{name}: {a}>{avail}"
        for name, a, avail in zip(pool.list_kinds(), requested, available)
        if a > avail
    ]
    if short:
        return RequestResult(
            process_id=pid,
            amounts=requested,
            outcome=RequestOutcome.DENIED,
            reason=DenialReason.INSUFFICIENT_AVAILABLE,
            message=f"Insufficient resources ({', '.join(short)})",
        )

    # Step 2: Request cannot exceed the declared ceiling
    if not record.within_need(requested):
        return RequestResult(
            process_id=pid,
            amounts=requested,
            outcome=RequestOutcome.DENIED,
            reason=DenialReason.EXCEEDS_NEED,
            message=f"Request exceeds need (requested: {list(requested)}, need: {record.need})",
        )

    # Step 3: Tentative allocation on a private copy
    snapshot = SystemSnapshot.build(pool, records)
    snapshot.apply_request(pid, requested)

    # Step 4: Safety simulation
    safe, sequence = is_safe_state(snapshot)

    # Step 5: Decision
    if safe:
        seq_str = " -> ".join(sequence)
        return RequestResult(
            process_id=pid,
            amounts=requested,
            outcome=RequestOutcome.GRANTED,
            safe_sequence=tuple(sequence),
            message=f"Safe state maintained, sequence: {seq_str}",
        )

    return RequestResult(
        process_id=pid,
        amounts=requested,
        outcome=RequestOutcome.DENIED,
        reason=DenialReason.UNSAFE_STATE,
        message="Unsafe state detected - granting could lead to deadlock",
    )
