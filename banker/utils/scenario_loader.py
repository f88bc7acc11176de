"""
Scenario Loader for the Banker's Algorithm Resource Manager.

Loads and validates JSON scenario files: the resource kinds, the processes
registered up front, and the ordered operations to replay.
Accepts the older type_id/total_instances resource format.
"""

import json
from typing import Dict, List, Any, Tuple

from banker.models.resource import ResourceKind, ResourcePool


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


EVENT_TYPES = ('register', 'request', 'release')


def load_scenario(file_path: str) -> Tuple[ResourcePool, List[Dict]]:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Tuple of (ResourcePool, events)
        - ResourcePool: Pool built from the 'resources' section
        - events: Ordered operations; declared processes come first as
          'register' events, followed by the 'events' section

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    return parse_scenario(data)


def parse_scenario(data: Dict[str, Any]) -> Tuple[ResourcePool, List[Dict]]:
    """Validate an already-decoded scenario document."""
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")
    if 'resources' not in data:
        raise ScenarioLoadError("Scenario missing 'resources' field")

    pool = _load_resources(data['resources'])
    num_kinds = pool.num_kinds

    events = []
    for proc_data in _entries(data, 'processes'):
        events.append(_load_process(proc_data, num_kinds))

    known = {e['process'] for e in events}
    for index, event in enumerate(_entries(data, 'events')):
        _validate_event(event, index, num_kinds)
        if event['type'] == 'register':
            known.add(event['process'])
        elif event['process'] not in known:
            raise ScenarioLoadError(
                f"Event {index}: process '{event['process']}' is never registered"
            )
        events.append(dict(event))

    return pool, events


def _load_resources(resource_data: List[Dict]) -> ResourcePool:
    """
    Load resource definitions from scenario data.

    Args:
        resource_data: List of resource dictionaries

    Returns:
        ResourcePool with kinds in file order
    """
    if not isinstance(resource_data, list) or not resource_data:
        raise ScenarioLoadError("'resources' must be a non-empty list")

    kinds = []
    for res in resource_data:
        if not isinstance(res, dict):
            raise ScenarioLoadError(f"Resource entry must be an object (got {res!r})")
        if 'name' in res:
            name = str(res['name'])
        elif 'type_id' in res:
            name = f"R{res['type_id']}"
        else:
            raise ScenarioLoadError("Resource missing 'name' field")

        total = res.get('total', res.get('total_instances'))
        if total is None:
            raise ScenarioLoadError(f"Resource {name} missing 'total'")
        if not _is_count(total):
            raise ScenarioLoadError(f"Resource {name}: total must be a non-negative integer")

        kinds.append(ResourceKind(name=name, total=total))

    try:
        return ResourcePool(kinds)
    except ValueError as e:
        raise ScenarioLoadError(str(e))


def _load_process(proc_data: Dict, num_kinds: int) -> Dict:
    """
    Load a single up-front process declaration as a register event.

    Args:
        proc_data: Process dictionary from scenario
        num_kinds: Number of resource kinds in the pool

    Returns:
        Register event dictionary
    """
    if not isinstance(proc_data, dict):
        raise ScenarioLoadError(f"Process entry must be an object (got {proc_data!r})")
    for field in ('id', 'max_demand'):
        if field not in proc_data:
            raise ScenarioLoadError(f"Process missing required field: {field}")

    event = {
        'type': 'register',
        'process': str(proc_data['id']),
        'max_demand': proc_data['max_demand'],
    }
    _check_vector(event['max_demand'], num_kinds, f"Process {event['process']}: max_demand")
    return event


def _validate_event(event: Dict, index: int, num_kinds: int) -> None:
    """
    Validate one scenario event.

    Args:
        event: Event dictionary
        index: Position in the events list (for messages)
        num_kinds: Number of resource kinds

    Raises:
        ScenarioLoadError: If event is invalid
    """
    if not isinstance(event, dict):
        raise ScenarioLoadError(f"Event {index}: must be an object (got {event!r})")
    if 'type' not in event:
        raise ScenarioLoadError(f"Event {index}: missing 'type' field")
    if 'process' not in event:
        raise ScenarioLoadError(f"Event {index}: missing 'process' field")
    if not isinstance(event['process'], str):
        raise ScenarioLoadError(f"Event {index}: 'process' must be a string")

    event_type = event['type']
    if event_type not in EVENT_TYPES:
        raise ScenarioLoadError(f"Event {index}: unknown event type '{event_type}'")

    if event_type == 'register':
        if 'max_demand' not in event:
            raise ScenarioLoadError(f"Event {index}: register event missing 'max_demand'")
        _check_vector(event['max_demand'], num_kinds, f"Event {index}: max_demand")
    elif event_type == 'request':
        if 'amounts' not in event:
            raise ScenarioLoadError(f"Event {index}: request event missing 'amounts'")
        _check_vector(event['amounts'], num_kinds, f"Event {index}: amounts")


def _entries(data: Dict[str, Any], section: str) -> List[Any]:
    entries = data.get(section, [])
    if not isinstance(entries, list):
        raise ScenarioLoadError(f"'{section}' must be a list")
    return entries


def _is_count(value: Any) -> bool:
    # JSON true/false decode to bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _check_vector(values: Any, num_kinds: int, label: str) -> None:
    if not isinstance(values, list):
        raise ScenarioLoadError(f"{label} must be a list")
    if len(values) != num_kinds:
        raise ScenarioLoadError(
            f"{label} length ({len(values)}) does not match resource count ({num_kinds})"
        )
    for v in values:
        if not _is_count(v):
            raise ScenarioLoadError(f"{label} entries must be non-negative integers (got {v!r})")


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if not present
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data.get('description', '')
    except (OSError, json.JSONDecodeError, AttributeError):
        return ''
