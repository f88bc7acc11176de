"""
Contract errors for the Banker's Algorithm Resource Manager.

These signal caller misuse and are always raised to the caller. A denied
request is not an error: it is returned as a RequestResult.
"""


class ResourceManagerError(Exception):
    """Base class for every contract violation raised by the manager."""
    pass


class DuplicateProcess(ResourceManagerError, ValueError):
    """Raised when registering a process id that is already live."""

    def __init__(self, process_id: str):
        self.process_id = process_id
        super().__init__(f"Process {process_id} is already registered")


class UnknownProcess(ResourceManagerError, LookupError):
    """Raised when an operation names a process that is not registered."""

    def __init__(self, process_id: str):
        self.process_id = process_id
        super().__init__(f"Process {process_id} is not registered")


class DemandVectorSizeMismatch(ResourceManagerError, ValueError):
    """Raised when a demand or request vector does not match the kind count."""

    def __init__(self, expected: int, actual: int, what: str = "max_demand"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what} has {actual} entries but the pool defines {expected} resource kinds"
        )


class NegativeAmount(ResourceManagerError, ValueError):
    """Raised when a demand or request vector contains a negative entry."""

    def __init__(self, kind: str, amount: int, what: str = "max_demand"):
        self.kind = kind
        self.amount = amount
        super().__init__(f"{what}[{kind}] must be >= 0 (got {amount})")


class CapacityExceeded(ResourceManagerError, ValueError):
    """
    Raised at registration when a declared maximum exceeds a kind's total.

    A process that declares more than the pool can ever hold would never be
    able to finish, so every later safety check would fail.
    """

    def __init__(self, kind: str, demand: int, total: int):
        self.kind = kind
        self.demand = demand
        self.total = total
        super().__init__(
            f"max_demand[{kind}] ({demand}) exceeds total capacity ({total})"
        )


class InvalidAmount(ResourceManagerError, ValueError):
    """Raised when a demand or request vector is not a sequence of whole numbers."""

    def __init__(self, value, what: str = "max_demand"):
        self.value = value
        super().__init__(f"{what} must be a sequence of integers (got {value!r})")
