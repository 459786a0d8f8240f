"""Configuration and snapshot loading for MentorMatch."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from mentormatch.matching.batch import MatchingConfig
from mentormatch.profile.models import Person, UserType

# Default paths
DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_CONFIG_PATH = DATA_DIR / "config.yaml"
DEFAULT_SNAPSHOT_PATH = DATA_DIR / "snapshot.yaml"
LOG_PATH = DATA_DIR / "mentormatch.log"

# Environment overrides, applied on top of the YAML file
ENV_MIN_SCORE = "MENTORMATCH_MIN_SCORE"
ENV_MAX_CLIENTS = "MENTORMATCH_MAX_CLIENTS"
ENV_SOLVER_MODE = "MENTORMATCH_SOLVER_MODE"


def ensure_data_dir() -> None:
    """Ensure the data directory exists."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def _read_document(path: Path) -> Optional[Any]:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if os.environ.get(ENV_MIN_SCORE):
        overrides["min_score"] = os.environ[ENV_MIN_SCORE]
    if os.environ.get(ENV_MAX_CLIENTS):
        overrides["max_clients_per_volunteer"] = os.environ[ENV_MAX_CLIENTS]
    if os.environ.get(ENV_SOLVER_MODE):
        overrides["solver_mode"] = os.environ[ENV_SOLVER_MODE].strip().lower()
    return overrides


def load_config(path: Optional[Path] = None, use_env: bool = True) -> MatchingConfig:
    """Load matching settings from YAML.

    Args:
        path: Optional path to the config file. Defaults to data/config.yaml.
        use_env: Apply MENTORMATCH_* environment overrides.

    Returns:
        MatchingConfig instance. Defaults are used if the default file
        doesn't exist or is empty.

    Raises:
        FileNotFoundError: If an explicitly given path doesn't exist.
        pydantic.ValidationError: If the file contains invalid settings.
    """
    data: Dict[str, Any] = {}

    if path is not None and not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    config_path = path or DEFAULT_CONFIG_PATH
    if config_path.exists():
        data = _read_document(config_path) or {}

    if use_env:
        data = {**data, **_env_overrides()}
        # The environment limit replaces a nested eligibility limit as well
        nested = data.get("eligibility")
        if os.environ.get(ENV_MAX_CLIENTS) and isinstance(nested, dict):
            data["eligibility"] = {
                **nested, "max_clients_per_volunteer": data["max_clients_per_volunteer"]
            }

    return MatchingConfig.model_validate(data)


def save_config(config: MatchingConfig, path: Optional[Path] = None) -> Path:
    """Save matching settings to YAML.

    Returns:
        Path where the config was saved.
    """
    if path is None:
        ensure_data_dir()
        path = DEFAULT_CONFIG_PATH

    # The nested eligibility limit always follows the top-level one
    data = config.model_dump(
        mode="json",
        exclude_none=True,
        exclude={"eligibility": {"max_clients_per_volunteer"}},
    )

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return path


def _people_from(data: Dict[str, Any], key: str, user_type: UserType, path: Path) -> List[Person]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise ValueError(f"Snapshot '{key}' must be a list: {path}")

    people = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"Snapshot '{key}' entry {position} must be a mapping: {path}")
        people.append(Person.model_validate({**entry, "user_type": user_type}))
    return people


def load_snapshot(path: Optional[Path] = None) -> Tuple[List[Person], List[Person]]:
    """Load clients and volunteers from a YAML or JSON snapshot.

    The document has two lists, ``clients`` and ``volunteers``; the
    ``user_type`` of each entry is filled in from the list it appears in.

    Returns:
        (clients, volunteers) in file order. Both empty if the default
        snapshot doesn't exist.

    Raises:
        FileNotFoundError: If an explicitly given path doesn't exist.
        ValueError: If the document is not a mapping, or a list entry isn't.
        pydantic.ValidationError: If a record is invalid.
    """
    if path is None:
        path = DEFAULT_SNAPSHOT_PATH
        if not path.exists():
            return [], []
    elif not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")

    data = _read_document(path)
    if data is None:
        return [], []
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot must be a mapping with clients/volunteers: {path}")

    clients = _people_from(data, "clients", UserType.CLIENT, path)
    volunteers = _people_from(data, "volunteers", UserType.VOLUNTEER, path)
    return clients, volunteers


def save_snapshot(people: Iterable[Person], path: Path) -> Path:
    """Write people back to a snapshot file, grouped by role.

    Returns:
        Path where the snapshot was saved.
    """
    data: Dict[str, List[Dict[str, Any]]] = {"clients": [], "volunteers": []}
    for person in people:
        entry = person.model_dump(mode="json", exclude_none=True, exclude={"user_type"})
        key = "clients" if person.is_client else "volunteers"
        data[key].append(entry)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return path
