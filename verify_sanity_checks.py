"""
Verify sanity checks are working:
1. Resource conservation after every grant/release
2. Denied requests leave state untouched
3. Every grant leaves a safe state
4. Conservation check catches corrupted bookkeeping
"""
import sys

from banker.analysis.events import EventType
from banker.manager import ResourceManager
from banker.utils.scenario_loader import load_scenario

# Load demo_banker scenario
scenario_path = "scenarios/demo_banker.json"
pool, events = load_scenario(scenario_path)
manager = ResourceManager(pool)

print("="*60)
print("SANITY CHECK VERIFICATION")
print("="*60)

# Initial state conservation
print("\n1. Initial state conservation check...")
try:
    manager.assert_resource_conservation("at initial state")
    print("   ✓ Resource conservation verified at initial state")
except AssertionError as e:
    print(f"   ✗ FAILED: {e}")
    sys.exit(1)

# Replay, checking each decision
print("\n2. Replaying scenario with per-event checks...")
for event in events:
    if event['type'] == 'register':
        manager.register(event['process'], event['max_demand'])
    elif event['type'] == 'release':
        manager.release(event['process'])
    else:
        before = manager.snapshot()
        result = manager.request(event['process'], event['amounts'])
        print(f"   {event['process']} {event['amounts']}: {result}")
        if result.granted and not manager.is_safe():
            print("   ✗ FAILED: grant left an unsafe state")
            sys.exit(1)
        if result.denied and manager.snapshot() != before:
            print("   ✗ FAILED: denial changed state")
            sys.exit(1)
    manager.assert_resource_conservation(f"after {event['type']} {event['process']}")
print("   ✓ Every grant safe, every denial side-effect free")

granted = len(manager.event_log.get_events_by_type(EventType.ALLOCATION))
denied = len(manager.event_log.get_events_by_type(EventType.DENIAL))
print(f"   Grants: {granted}, denials: {denied}")

# Verify the conservation check would trigger
print("\n3. Verify conservation check (simulated violation)...")
victim = manager.snapshot().processes[0].process_id
record = manager._records[victim]
original = record.held[0]
try:
    record.held[0] = original + 1
    manager.assert_resource_conservation("corruption test")
    print("   ✗ FAILED: Should have caught held/used mismatch")
    sys.exit(1)
except AssertionError:
    record.held[0] = original
    print("   ✓ Held/used mismatch properly detected")

print("\n" + "="*60)
print("ALL SANITY CHECKS PASSED ✓")
print("="*60)
