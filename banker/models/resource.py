"""
Resource model for the Banker's Algorithm Resource Manager.

Represents resource kinds and the pool that tracks their capacity.
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterable, List, Union


KindRef = Union[int, str]


@dataclass
class ResourceKind:
    """
    A category of allocatable unit with a fixed total capacity.

    Attributes:
        name: Stable identifier of the kind
        total: Total number of units in the system
        used: Units currently held by all processes

    Invariant:
        0 <= used <= total
    """
    name: str
    total: int
    used: int = 0

    def __post_init__(self):
        """Validate resource state."""
        if self.total < 0:
            raise ValueError(f"Resource {self.name}: total cannot be negative")
        if self.used < 0:
            raise ValueError(f"Resource {self.name}: used cannot be negative")
        if self.used > self.total:
            raise ValueError(
                f"Resource {self.name}: used ({self.used}) "
                f"exceeds total ({self.total})"
            )

    @property
    def available(self) -> int:
        """Units not held by any process."""
        return self.total - self.used


class ResourcePool:
    """
    Source of truth for total and used capacity per resource kind.

    The order of kinds given at construction is fixed for the pool's
    lifetime and defines the vector index used by every demand, request
    and snapshot.
    """

    def __init__(self, kinds: Iterable[ResourceKind]):
        self._kinds: List[ResourceKind] = list(kinds)
        names = [k.name for k in self._kinds]
        if len(set(names)) != len(names):
            raise ValueError(f"Resource kind names must be unique: {names}")
        self._index = {name: i for i, name in enumerate(names)}

    @classmethod
    def from_totals(cls, totals: dict) -> "ResourcePool":
        """Build a pool from an ordered mapping of kind name to total."""
        return cls(ResourceKind(name=name, total=total) for name, total in totals.items())

    @property
    def num_kinds(self) -> int:
        """Number of resource kinds in the pool."""
        return len(self._kinds)

    def list_kinds(self) -> List[str]:
        """Kind names in index order."""
        return [k.name for k in self._kinds]

    def kind(self, ref: KindRef) -> ResourceKind:
        """Look up a kind by index or by name."""
        return self._kinds[self.index_of(ref)]

    def index_of(self, ref: KindRef) -> int:
        if isinstance(ref, str):
            if ref not in self._index:
                raise KeyError(f"Unknown resource kind: {ref}")
            return self._index[ref]
        if ref < 0 or ref >= len(self._kinds):
            raise IndexError(f"Resource kind index out of range: {ref}")
        return ref

    def available(self, ref: KindRef) -> int:
        return self.kind(ref).available

    def commit_use(self, ref: KindRef, delta: int) -> None:
        """
        Apply a change in used units to one kind.

        The manager validates every request before calling this, so a
        result outside 0 <= used <= total means its bookkeeping is broken.

        Args:
            ref: Kind index or name
            delta: Units taken (positive) or returned (negative)
        """
        kind = self.kind(ref)
        kind.used += delta
        assert 0 <= kind.used <= kind.total, (
            f"Resource {kind.name}: used ({kind.used}) outside [0, {kind.total}] "
            f"after applying delta {delta}"
        )

    def total_vector(self) -> np.ndarray:
        """Get total capacity vector [K]."""
        return np.array([k.total for k in self._kinds], dtype=int)

    def used_vector(self) -> np.ndarray:
        """Get used units vector [K]."""
        return np.array([k.used for k in self._kinds], dtype=int)

    def available_vector(self) -> np.ndarray:
        """Get available units vector [K]."""
        return np.array([k.available for k in self._kinds], dtype=int)

    def __iter__(self):
        return iter(self._kinds)

    def __len__(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        kinds = ", ".join(f"{k.name}={k.used}/{k.total}" for k in self._kinds)
        return f"ResourcePool({kinds})"
