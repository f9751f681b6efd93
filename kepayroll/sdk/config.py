"""Configuration management for ke-payroll.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - roster: path to roster.yaml (optional, if not colocated)
   - default_region: minimum-wage region for employees without one
   - max_workers: thread pool size for batch runs

2. roster.yaml - Employer and employee records
   - employer: name, kra_pin
   - employees: list of employee records (snake_case or camelCase keys)

Config directory resolution:
1. KE_PAYROLL_CONFIG_PATH environment variable (if set)
2. ~/.config/ke-payroll/ (XDG_CONFIG_HOME fallback)

Roster resolution:
1. settings.json "roster" key (if set via CLI)
2. roster.yaml in same config directory
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


APP_NAME = "ke-payroll"
CONFIG_PATH_ENV = "KE_PAYROLL_CONFIG_PATH"
SETTINGS_FILENAME = "settings.json"
ROSTER_FILENAME = "roster.yaml"


class ConfigNotFoundError(Exception):
    """Raised when a required configuration file is missing or unreadable."""
    pass


class RosterNotFoundError(Exception):
    """Raised when no roster is found."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. KE_PAYROLL_CONFIG_PATH environment variable
    2. ~/.config/ke-payroll/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)

    Raises:
        ConfigNotFoundError: If settings.json exists but is not valid JSON
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    try:
        with open(settings_file, "r") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigNotFoundError(f"Invalid settings file {settings_file}: {e}") from e


def save_settings(settings: dict) -> Path:
    """Save settings to settings.json, creating the config directory if needed."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json.

    Args:
        key: Setting key (e.g., "roster", "default_region")
        default: Default value if key not found
    """
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_roster_path(require_exists: bool = False) -> Path:
    """Get the path to the roster file.

    Resolution order:
    1. settings.json "roster" key (if set)
    2. roster.yaml in config directory

    Raises:
        RosterNotFoundError: If require_exists=True and no roster found
    """
    custom_roster = get_setting("roster")
    if custom_roster:
        roster_path = Path(custom_roster).expanduser()
        if require_exists and not roster_path.exists():
            raise RosterNotFoundError(
                f"Roster not found at configured path: {roster_path}\n\n"
                f"Update with: ke-payroll settings set roster /path/to/roster.yaml"
            )
        return roster_path

    roster_path = get_config_dir() / ROSTER_FILENAME
    if require_exists and not roster_path.exists():
        raise RosterNotFoundError(
            f"No roster found. Checked:\n"
            f"  1. settings.json 'roster' key (not set)\n"
            f"  2. {roster_path} (not found)\n\n"
            f"Set a roster with: ke-payroll settings set roster /path/to/roster.yaml\n"
            f"Or pass one directly: ke-payroll run --roster /path/to/roster.yaml"
        )

    return roster_path


def load_yaml_file(path: Path) -> Any:
    """Load a YAML (or JSON, which YAML accepts) file.

    Raises:
        ConfigNotFoundError: If the file is missing or does not parse
    """
    path = Path(path)
    if not path.exists():
        raise ConfigNotFoundError(f"File not found: {path}")
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigNotFoundError(f"Invalid YAML in {path}: {e}") from e


def load_roster(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the roster.

    Args:
        path: Explicit roster path (uses get_roster_path() if not specified)

    Returns:
        Dict with "employer" (dict) and "employees" (list). Employees without
        a region get the default_region setting when one is set.

    Raises:
        RosterNotFoundError: If the roster file doesn't exist
        ConfigNotFoundError: If the roster is not valid YAML or has no employees list
    """
    if path is None:
        path = get_roster_path(require_exists=True)
    path = Path(path)
    if not path.exists():
        raise RosterNotFoundError(f"Roster not found: {path}")

    data = load_yaml_file(path) or {}
    if not isinstance(data, dict):
        raise ConfigNotFoundError(f"Roster {path} must be a mapping with an 'employees' list")

    employees = data.get("employees") or []
    if not isinstance(employees, list):
        raise ConfigNotFoundError(f"Roster {path}: 'employees' must be a list")

    default_region = get_setting("default_region")
    if default_region:
        employees = [
            emp if not isinstance(emp, dict) or emp.get("region") or emp.get("location")
            else {**emp, "region": default_region}
            for emp in employees
        ]

    return {
        "employer": data.get("employer") or {},
        "employees": employees,
    }


def load_period_inputs(path: Path) -> Dict[str, Dict[str, Any]]:
    """Load per-employee period inputs keyed by employee id.

    The file is a mapping of employee id -> inputs (overtime_hours,
    unpaid_days, bonuses, custom_deductions, overtime_type).

    Raises:
        ConfigNotFoundError: If the file is missing, does not parse, or is not a mapping
    """
    data = load_yaml_file(path) or {}
    if not isinstance(data, dict):
        raise ConfigNotFoundError(f"Period inputs {path} must map employee ids to inputs")
    return {str(k): v for k, v in data.items()}


def roster_entries(
    roster: Dict[str, Any],
    period_inputs: Optional[Dict[str, Dict[str, Any]]] = None,
) -> List[tuple]:
    """Pair each roster employee with their period inputs (None when absent)."""
    period_inputs = period_inputs or {}
    entries = []
    for emp in roster.get("employees", []):
        emp_id = None
        if isinstance(emp, dict):
            emp_id = emp.get("employee_id", emp.get("employeeId", emp.get("id")))
        entries.append((emp, period_inputs.get(str(emp_id)) if emp_id is not None else None))
    return entries
