"""
Scenario Loader for the Resource Allocation & Deadlock Simulator.

Loads and validates JSON scenario files: the initial processes, resources
and declared maximum demands, plus an ordered list of actions to replay.
"""

import json
from typing import Dict, List, Any, Tuple

from models.errors import AllocationError
from models.system_state import SystemState


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


# Action type -> fields it must carry
ACTION_FIELDS = {
    'register_process': ['pid'],
    'register_resource': ['rid', 'instances'],
    'request': ['pid', 'rid'],
    'release': ['pid', 'rid'],
    'set_max': ['pid', 'rid', 'value'],
    'check_deadlock': [],
    'check_safety': [],
    'check_request': ['pid', 'rid'],
}


def load_scenario(file_path: str) -> Tuple[SystemState, List[Dict[str, Any]]]:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Tuple of (SystemState, actions)
        - SystemState: Processes, resources and max demands registered
        - actions: Validated action dictionaries, in file order

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    return build_scenario(read_scenario_file(file_path))


def read_scenario_file(file_path: str) -> Dict[str, Any]:
    """
    Read the raw scenario object from a JSON file.

    Raises:
        ScenarioLoadError: If the file is missing, not JSON or not an object
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")
    return data


def build_scenario(data: Dict[str, Any]) -> Tuple[SystemState, List[Dict[str, Any]]]:
    """
    Register the scenario setup and validate its actions.

    Args:
        data: Scenario object as read by read_scenario_file

    Returns:
        Tuple of (SystemState, actions), as load_scenario

    Raises:
        ScenarioLoadError: If the scenario is malformed
    """
    processes = _get_list(data, 'processes')
    resources = _load_resources(_get_list(data, 'resources'))
    max_demand = _get_list(data, 'max_demand')
    raw_actions = _get_list(data, 'actions')

    system_state = SystemState()

    try:
        for pid in processes:
            system_state.register_process(pid)

        for res in resources:
            system_state.register_resource(res['id'], res['instances'])

        for entry in max_demand:
            if not isinstance(entry, dict):
                raise ScenarioLoadError("max_demand entry must be an object")
            for key in ('pid', 'rid', 'value'):
                if key not in entry:
                    raise ScenarioLoadError(f"max_demand entry missing '{key}' field")
            for key in ('pid', 'rid'):
                _require_string(entry[key], f"max_demand entry '{key}'")
            system_state.set_max_demand(entry['pid'], entry['rid'], entry['value'])
    except AllocationError as e:
        raise ScenarioLoadError(f"Invalid scenario setup: {e}")

    actions = [_validate_action(action, index) for index, action in enumerate(raw_actions)]

    return system_state, actions


def _get_list(data: Dict[str, Any], key: str) -> List[Any]:
    """Return data[key] (default empty), which must be a JSON array."""
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ScenarioLoadError(f"'{key}' must be a list (got {type(value).__name__})")
    return value


def _require_string(value: Any, what: str) -> None:
    if not isinstance(value, str):
        raise ScenarioLoadError(f"{what} must be a string (got {value!r})")


def _load_resources(resource_data: List[Any]) -> List[Dict]:
    """
    Validate resource definitions from scenario data.

    Args:
        resource_data: List of resource dictionaries

    Returns:
        The same dictionaries, in file order (registration order)
    """
    for res in resource_data:
        if not isinstance(res, dict):
            raise ScenarioLoadError(f"Resource entry must be an object (got {res!r})")
        if 'id' not in res:
            raise ScenarioLoadError("Resource missing 'id' field")
        if 'instances' not in res:
            raise ScenarioLoadError(f"Resource {res['id']} missing 'instances'")
    return list(resource_data)


def _validate_action(action: Any, index: int) -> Dict:
    """
    Validate one action.

    Only the shape is checked here; unknown ids or releases of resources
    that are not held are reported when the action is replayed.

    Raises:
        ScenarioLoadError: If action is malformed
    """
    if not isinstance(action, dict):
        raise ScenarioLoadError(f"Action {index}: must be an object")
    if 'type' not in action:
        raise ScenarioLoadError(f"Action {index}: missing 'type' field")

    action_type = action['type']
    if not isinstance(action_type, str) or action_type not in ACTION_FIELDS:
        raise ScenarioLoadError(f"Action {index}: unknown action type '{action_type}'")

    for key in ACTION_FIELDS[action_type]:
        if key not in action:
            raise ScenarioLoadError(f"Action {index}: {action_type} action missing '{key}'")
        if key in ('pid', 'rid'):
            _require_string(action[key], f"Action {index}: '{key}'")

    return action


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
    except (OSError, json.JSONDecodeError):
        return ''
    if not isinstance(data, dict):
        return ''
    return data.get('description', '')
