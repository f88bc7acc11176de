"""
Resource Manager Tests

Lifecycle operations, contract errors, the textbook scenarios, and the
invariants that must hold after every committed operation.
"""

import io
import sys
import threading
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from banker.algorithms.avoidance import DenialReason, RequestOutcome
from banker.analysis.events import EventType
from banker.errors import (
    CapacityExceeded,
    DemandVectorSizeMismatch,
    DuplicateProcess,
    InvalidAmount,
    NegativeAmount,
    ResourceManagerError,
    UnknownProcess,
)
from banker.manager import ResourceManager
from banker.models.process import ProcessState
from banker.models.resource import ResourceKind
from banker.utils.logger import ManagerLogger


def _manager(**kwargs):
    return ResourceManager.with_totals({"A": 10, "B": 5, "C": 7}, **kwargs)


def _textbook_manager():
    """Register P0..P4 and grant the classic initial allocation."""
    manager = _manager()
    maxima = [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]]
    held = [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]]
    for i, demand in enumerate(maxima):
        manager.register(f"P{i}", demand)
    for i, amounts in enumerate(held):
        assert manager.request(f"P{i}", amounts).granted
    assert manager.snapshot().available == [3, 3, 2]
    return manager


def _check_invariants(manager):
    report = manager.snapshot()
    for index, kind in enumerate(report.kinds):
        held_total = sum(p.held[index] for p in report.processes)
        assert kind.used == held_total, f"{kind.name}: used != sum(held)"
        assert kind.available == kind.total - kind.used
        assert kind.available >= 0
    for p in report.processes:
        assert all(0 <= h <= m for h, m in zip(p.held, p.max_demand))
        assert list(p.need) == [m - h for m, h in zip(p.max_demand, p.held)]


def test_list_kinds():
    manager = _manager()
    assert manager.list_kinds() == ["A", "B", "C"]


def test_manager_accepts_kind_list():
    manager = ResourceManager([ResourceKind("X", 2), ResourceKind("Y", 1)])
    assert manager.list_kinds() == ["X", "Y"]


def test_register():
    manager = _manager()
    record = manager.register("P1", [7, 5, 3])

    assert record.held == (0, 0, 0)
    assert record.need == (7, 5, 3)
    assert manager.has_process("P1")
    assert manager.num_processes == 1
    # Registration reserves nothing
    assert manager.snapshot().available == [10, 5, 7]


def test_register_contract_errors():
    """Test every registration precondition."""
    print("\n" + "="*60)
    print("TEST: Registration Contract Errors")
    print("="*60)

    manager = _manager()
    manager.register("P1", [1, 1, 1])

    with pytest.raises(DuplicateProcess):
        manager.register("P1", [1, 1, 1])
    with pytest.raises(DemandVectorSizeMismatch):
        manager.register("P2", [1, 1])
    with pytest.raises(DemandVectorSizeMismatch):
        manager.register("P2", [1, 1, 1, 1])
    with pytest.raises(NegativeAmount):
        manager.register("P2", [1, -1, 1])
    with pytest.raises(CapacityExceeded) as excinfo:
        manager.register("P2", [1, 6, 1])
    assert excinfo.value.kind == "B"
    assert excinfo.value.total == 5

    assert not manager.has_process("P2"), "Rejected registrations leave no record"
    assert manager.num_processes == 1
    print("  ✓ All contract errors raised")


def test_contract_errors_share_base_class():
    manager = _manager()
    with pytest.raises(ResourceManagerError):
        manager.request("nobody", [0, 0, 0])
    with pytest.raises(ValueError):
        manager.register("P1", [11, 0, 0])
    with pytest.raises(LookupError):
        manager.release("nobody")


def test_register_accepts_numpy_vector():
    manager = _manager()
    record = manager.register("P1", np.array([1, 2, 3]))
    assert record.max_demand == (1, 2, 3)
    assert all(type(v) is int for v in record.max_demand)


def test_request_contract_errors():
    manager = _manager()
    manager.register("P1", [1, 1, 1])

    with pytest.raises(UnknownProcess):
        manager.request("P9", [0, 0, 0])
    with pytest.raises(DemandVectorSizeMismatch):
        manager.request("P1", [1])
    with pytest.raises(NegativeAmount):
        manager.request("P1", [0, -1, 0])
    assert len(manager.event_log.get_events_by_type(EventType.DENIAL)) == 0, \
        "Contract errors are not decisions"


@pytest.mark.parametrize("vector", [
    [1.9, 0, 0],
    "123",
    b"123",
    ["x", 0, 0],
    [True, 0, 0],
    [None, 0, 0],
    7,
])
def test_non_integer_vectors_are_rejected(vector):
    """Strings, floats, bools and scalars never pass as unit counts."""
    manager = _manager()
    manager.register("P1", [3, 3, 3])
    before = manager.snapshot()

    with pytest.raises(InvalidAmount):
        manager.register("P2", vector)
    with pytest.raises(InvalidAmount):
        manager.request("P1", vector)

    assert not manager.has_process("P2")
    assert manager.snapshot() == before
    assert len(manager.event_log) == 1


def test_invalid_amount_is_a_contract_error():
    manager = _manager()
    with pytest.raises(ResourceManagerError):
        manager.register("P1", [1.0, 1, 1])
    with pytest.raises(ValueError):
        manager.register("P1", ["1", 1, 1])


def test_manager_rejects_pool_already_in_use():
    with pytest.raises(ValueError, match="already has 2 units in use"):
        ResourceManager([ResourceKind("A", 5, used=2)])

    shared = ResourceManager.with_totals({"A": 5})
    shared.register("P1", [2])
    shared.request("P1", [2])
    with pytest.raises(ValueError):
        ResourceManager(shared.pool)
    assert shared.pool.kind("A").used == 2


def test_two_process_scenario():
    """
    A/B/C = 10/5/7 with P1 [7,5,3] and P2 [3,2,2].

    Each step's verdict is the one the safety simulation produces for the
    committed state.
    """
    print("\n" + "="*60)
    print("TEST: Two-Process Scenario")
    print("="*60)

    manager = _manager()
    manager.register("P1", [7, 5, 3])
    manager.register("P2", [3, 2, 2])

    result = manager.request("P1", [2, 1, 2])
    print(f"  P1 [2,1,2]: {result}")
    assert result.outcome == RequestOutcome.GRANTED
    assert manager.snapshot().available == [8, 4, 5]
    assert manager.snapshot().process("P1").need == (5, 4, 1)

    # Tentative available 5/2/3: P1 blocked on B, P2 finishes and frees 3/2/2,
    # after which P1's need [5,4,1] fits in 8/4/5
    result = manager.request("P2", [3, 2, 2])
    print(f"  P2 [3,2,2]: {result}")
    assert result.granted
    assert result.safe_sequence == ("P2", "P1")
    assert manager.snapshot().available == [5, 2, 3]

    released = manager.release("P1")
    print(f"  release P1: {released}")
    assert released == [2, 1, 2]
    assert manager.snapshot().available == [7, 3, 5]
    assert not manager.has_process("P1")
    _check_invariants(manager)


def test_textbook_scenario():
    """Grant, deny on availability, deny on safety."""
    print("\n" + "="*60)
    print("TEST: Textbook Scenario")
    print("="*60)

    manager = _textbook_manager()

    result = manager.request("P1", [1, 0, 2])
    assert result.granted
    assert result.safe_sequence == ("P1", "P3", "P0", "P2", "P4")
    assert manager.snapshot().available == [2, 3, 0]

    result = manager.request("P4", [3, 3, 0])
    assert result.denied
    assert result.reason == DenialReason.INSUFFICIENT_AVAILABLE

    result = manager.request("P0", [0, 2, 0])
    assert result.denied
    assert result.reason == DenialReason.UNSAFE_STATE

    # Once P1 leaves, the same request is safe
    manager.release("P1")
    result = manager.request("P0", [0, 2, 0])
    assert result.granted
    assert result.safe_sequence == ("P3", "P0", "P2", "P4")
    _check_invariants(manager)
    print("  ✓ Textbook verdicts reproduced")


def test_single_kind_unsafe_request():
    manager = ResourceManager.with_totals({"tape": 3})
    manager.register("P1", [3])
    manager.register("P2", [3])

    assert manager.request("P1", [1]).granted
    result = manager.request("P2", [1])
    assert result.denied
    assert result.reason == DenialReason.UNSAFE_STATE
    assert manager.snapshot().available == [2]


def test_request_over_declared_maximum_is_denied():
    manager = _manager()
    manager.register("P1", [2, 2, 2])
    manager.request("P1", [2, 0, 0])

    result = manager.request("P1", [1, 0, 0])
    assert result.denied
    assert result.reason == DenialReason.EXCEEDS_NEED
    assert manager.record("P1").held == (2, 0, 0)


def test_denial_does_not_mutate_state():
    """Pool and every record are identical before and after a denial."""
    manager = _textbook_manager()
    manager.request("P1", [1, 0, 2])

    before = manager.snapshot()
    held_before = {pid: manager.record(pid).held for pid in ["P0", "P1", "P2", "P3", "P4"]}

    for pid, amounts in [("P0", [0, 2, 0]), ("P4", [3, 3, 0]), ("P3", [1, 0, 0])]:
        assert manager.request(pid, amounts).denied

    assert manager.snapshot() == before
    for pid, held in held_before.items():
        assert manager.record(pid).held == held


def test_release_returns_exactly_held():
    manager = _textbook_manager()
    before = manager.snapshot()
    held = before.process("P2").held

    released = manager.release("P2")
    after = manager.snapshot()

    assert released == list(held)
    for k in range(3):
        assert after.available[k] == before.available[k] + held[k]
    assert "P2" not in [p.process_id for p in after.processes]


def test_release_of_idle_process():
    manager = _manager()
    manager.register("P1", [1, 1, 1])
    assert manager.release("P1") == [0, 0, 0]
    assert manager.snapshot().available == [10, 5, 7]


def test_release_unknown_process():
    manager = _manager()
    with pytest.raises(UnknownProcess):
        manager.release("P1")

    manager.register("P1", [1, 0, 0])
    manager.release("P1")
    with pytest.raises(UnknownProcess):
        manager.release("P1")


def test_release_marks_record_released_and_allows_reuse():
    manager = _manager()
    manager.register("P1", [1, 1, 1])
    live = manager._records["P1"]
    manager.release("P1")
    assert live.state == ProcessState.RELEASED
    assert not manager.has_process("P1")

    again = manager.register("P1", [2, 2, 2])
    assert again.max_demand == (2, 2, 2)
    assert manager._records["P1"] is not live


def test_snapshot_is_idempotent():
    manager = _textbook_manager()
    first = manager.snapshot()
    second = manager.snapshot()
    assert first == second
    assert manager.describe() == manager.describe()
    assert manager.snapshot() == first


def test_describe_renders_tables():
    manager = _textbook_manager()
    text = manager.describe()
    assert "RESOURCE POOL" in text
    for pid in ["P0", "P1", "P2", "P3", "P4"]:
        assert pid in text


def test_is_safe_and_safe_sequence():
    manager = _textbook_manager()
    assert manager.is_safe()
    assert manager.safe_sequence() == ["P1", "P3", "P0", "P2", "P4"]
    assert ResourceManager.with_totals({"A": 1}).is_safe(), "Empty manager is safe"


def test_events_recorded():
    manager = _manager()
    manager.register("P1", [7, 5, 3])
    manager.register("P2", [3, 2, 2])
    manager.request("P1", [2, 1, 2])
    manager.request("P2", [4, 0, 0])
    manager.release("P1")

    log = manager.event_log
    assert [e.event_type for e in log.events] == [
        EventType.REGISTER,
        EventType.REGISTER,
        EventType.ALLOCATION,
        EventType.DENIAL,
        EventType.RELEASE,
    ]
    assert [e.seq for e in log.events] == [1, 2, 3, 4, 5]
    denial = log.get_events_by_type(EventType.DENIAL)[0]
    assert denial.reason == DenialReason.EXCEEDS_NEED.value
    assert log.get_events_by_process("P1")[-1].amounts == (2, 1, 2)


def test_decisions_are_logged():
    stream = io.StringIO()
    logger = ManagerLogger(stream=stream)
    manager = _manager(logger=logger)

    manager.register("P1", [7, 5, 3])
    manager.request("P1", [2, 1, 2])
    manager.request("P1", [9, 0, 0])
    manager.release("P1")

    output = stream.getvalue()
    assert "P1 registered (max_demand=[7, 5, 3])" in output
    assert "P1 requests [2, 1, 2] - GRANTED" in output
    assert "P1 requests [9, 0, 0] - DENIED" in output
    assert "P1 released [2, 1, 2]" in output


def test_conservation_check_detects_corruption():
    manager = _manager()
    manager.register("P1", [3, 3, 3])
    manager.request("P1", [1, 1, 1])

    manager._records["P1"].held[0] = 2
    with pytest.raises(AssertionError):
        manager.assert_resource_conservation("after corrupting P1")


def test_record_is_a_read_only_copy():
    manager = _manager()
    registered = manager.register("P1", [3, 3, 3])
    manager.request("P1", [1, 1, 1])

    record = manager.record("P1")
    assert record.held == (1, 1, 1)
    assert record.need == (2, 2, 2)
    assert registered.held == (0, 0, 0), "Earlier reports never see later grants"

    with pytest.raises(TypeError):
        record.held[0] = 3
    with pytest.raises(AttributeError):
        record.held = (3, 3, 3)
    manager.assert_resource_conservation("after touching a report")
    with pytest.raises(UnknownProcess):
        manager.record("P2")


def test_random_operations_preserve_invariants():
    """
    Drive the manager with random register/request/release calls.

    After every call the bookkeeping invariants hold, every grant leaves
    a safe state, and every denial leaves state untouched.
    """
    print("\n" + "="*60)
    print("TEST: Random Operation Sequences")
    print("="*60)

    rng = np.random.default_rng(7)
    totals = {"A": 6, "B": 4, "C": 5}
    grants = denials = 0

    for _ in range(20):
        manager = ResourceManager.with_totals(totals)
        live = []
        next_id = 0
        for _ in range(60):
            op = rng.choice(["register", "request", "request", "request", "release"])
            if op == "register" or not live:
                pid = f"P{next_id}"
                next_id += 1
                demand = [int(rng.integers(0, t + 1)) for t in totals.values()]
                manager.register(pid, demand)
                live.append(pid)
            elif op == "request":
                pid = live[int(rng.integers(len(live)))]
                need = manager.record(pid).need
                amounts = [int(rng.integers(0, n + 2)) for n in need]
                before = manager.snapshot()
                result = manager.request(pid, amounts)
                if result.granted:
                    grants += 1
                    assert manager.is_safe(), "Grant left an unsafe state"
                else:
                    denials += 1
                    assert manager.snapshot() == before, "Denial changed state"
            else:
                pid = live.pop(int(rng.integers(len(live))))
                before = manager.snapshot()
                held = before.process(pid).held
                manager.release(pid)
                after = manager.snapshot()
                assert after.available == [a + h for a, h in zip(before.available, held)]
            _check_invariants(manager)

    print(f"  ✓ {grants} grants, {denials} denials, invariants held throughout")
    assert grants > 0 and denials > 0


def test_concurrent_callers_are_serialized():
    """Threads issuing requests and releases never break the invariants."""
    manager = ResourceManager.with_totals({"A": 8, "B": 8})
    errors = []

    def worker(worker_id: int) -> None:
        try:
            for round_no in range(25):
                pid = f"W{worker_id}-{round_no}"
                manager.register(pid, [3, 3])
                for _ in range(3):
                    manager.request(pid, [1, 1])
                    assert manager.is_safe()
                manager.release(pid)
        except AssertionError as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert manager.num_processes == 0
    assert manager.snapshot().available == [8, 8]
    _check_invariants(manager)
