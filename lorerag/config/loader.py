"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  - Static defaults checked into the repo
#   2. .env file           - Local developer overrides (not committed)
#   3. Environment vars    - Set at deploy time
#
# The YAML mapping is handed to Settings as init kwargs; Settings orders
# its sources so env and .env still win, merging nested groups key by key.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from lorerag.config.settings import Settings
from lorerag.utils.errors import ConfigurationError


def load_yaml(path: str | Path) -> dict:
    """Read a YAML mapping from *path*; a missing file yields ``{}``."""
    config_path = Path(path)
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    return data


def load_settings(path: str | Path = "config/config.yaml") -> Settings:
    """Build :class:`Settings` from the YAML file, ``.env`` and the environment.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Fully validated settings.

    Raises:
        ConfigurationError: If the YAML is malformed or any value fails
            validation (unknown provider, missing credential, bad budgets).
    """
    try:
        yaml_config = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc

    try:
        return Settings(**yaml_config)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
