"""Configuration management for docktidy."""

import json
import logging
from pathlib import Path

from docktidy.classifier import ClassifierPolicy
from docktidy.models import PruneOptions, ResourceType

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".docktidy"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_CONFIG = {
    "older_than_days": 7,
    "min_size_bytes": 0,
    "exclude_labels": ["docktidy.keep"],
    "include_types": [],
    "safe_after_days": 90,
    "high_risk_types": [],
    "timeout_seconds": 5,
}

INT_KEYS = {"older_than_days", "min_size_bytes", "safe_after_days", "timeout_seconds"}
TYPE_KEYS = {"include_types", "high_risk_types"}


def load_config(path: Path | None = None) -> dict:
    """Load configuration, merging with defaults.

    Args:
        path: Config file to read (defaults to ~/.docktidy/config.json)

    Returns:
        Configuration dictionary
    """
    path = path or CONFIG_FILE
    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path) as f:
            user_config = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return DEFAULT_CONFIG.copy()

    if not isinstance(user_config, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return DEFAULT_CONFIG.copy()

    # Merge with defaults
    config = DEFAULT_CONFIG.copy()
    for key, value in user_config.items():
        if key in DEFAULT_CONFIG and not _valid(key, value):
            logger.warning("Ignoring invalid %s in %s: %r", key, path, value)
            continue
        config[key] = value
    return config


def _valid(key: str, value) -> bool:
    """Check a config value has the shape its default has."""
    if key in INT_KEYS:
        return isinstance(value, int) and not isinstance(value, bool) and value >= 0
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return False
    if key in TYPE_KEYS:
        try:
            parse_types(value)
        except ValueError:
            return False
    return True


def save_config(config: dict, path: Path | None = None) -> None:
    """Persist configuration.

    Args:
        config: Configuration dictionary to save
        path: Destination (defaults to ~/.docktidy/config.json)
    """
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config, f, indent=2)


def parse_types(values: list[str] | None) -> frozenset[ResourceType]:
    """Turn type names into ResourceTypes.

    Raises:
        ValueError: For an unknown type name
    """
    return frozenset(ResourceType(v.strip().lower()) for v in values or [])


def build_prune_options(config: dict, **overrides) -> PruneOptions:
    """Build PruneOptions from config, letting non-None overrides win."""
    values = {
        "dry_run": True,
        "force": False,
        "older_than_days": int(config.get("older_than_days") or 0),
        "include_types": parse_types(config.get("include_types")),
        "exclude_labels": frozenset(config.get("exclude_labels") or []),
        "min_size_bytes": int(config.get("min_size_bytes") or 0),
    }
    for key, value in overrides.items():
        if value is not None:
            values[key] = value
    return PruneOptions(**values)


def build_policy(config: dict) -> ClassifierPolicy:
    return ClassifierPolicy(
        safe_after_days=int(config.get("safe_after_days", DEFAULT_CONFIG["safe_after_days"])),
        high_risk_types=parse_types(config.get("high_risk_types")),
    )
