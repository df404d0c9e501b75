"""User configuration loading and overrides for runtime tunables.

Extracted from snapinit.py to keep the entrypoint slim. Values come from,
in increasing precedence: the defaults in ``constants.Constants``, an
optional YAML/JSON configuration file, and CLI flags.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from jsonschema import Draft7Validator

from constants import Constants
from discovery.ancestors import find_file_up
from errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "snapshot_index_url": {"type": "string", "minLength": 1},
        "snapshot_lts_url_template": {"type": "string", "minLength": 1},
        "snapshot_nightly_url_template": {"type": "string", "minLength": 1},
        "package_index_url_template": {"type": "string", "minLength": 1},
        "min_supported_snapshot": {"type": "string", "pattern": r"^lts-\d+\.\d+$"},
        "ignored_dirs": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "descriptor_file": {"type": "string", "minLength": 1},
        "descriptor_suffix": {"type": "string", "minLength": 1},
        "http": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "timeout": {"type": "number", "exclusiveMinimum": 0},
                "retry_max": {"type": "integer", "minimum": 1},
                "retry_base_delay_sec": {"type": "number", "minimum": 0},
                "cache_ttl_sec": {"type": "number", "minimum": 0},
            },
        },
    },
}

# config key -> Constants attribute
_TOP_LEVEL = {
    "snapshot_index_url": "SNAPSHOT_INDEX_URL",
    "snapshot_lts_url_template": "SNAPSHOT_LTS_URL_TEMPLATE",
    "snapshot_nightly_url_template": "SNAPSHOT_NIGHTLY_URL_TEMPLATE",
    "package_index_url_template": "PACKAGE_INDEX_URL_TEMPLATE",
    "min_supported_snapshot": "MIN_SUPPORTED_SNAPSHOT",
    "ignored_dirs": "IGNORED_DIRS",
    "descriptor_file": "DESCRIPTOR_FILE",
    "descriptor_suffix": "DESCRIPTOR_SUFFIX",
}
_HTTP = {
    "timeout": "REQUEST_TIMEOUT",
    "retry_max": "HTTP_RETRY_MAX",
    "retry_base_delay_sec": "HTTP_RETRY_BASE_DELAY_SEC",
    "cache_ttl_sec": "HTTP_CACHE_TTL_SEC",
}


def validate_config(data: Any) -> None:
    """Validate a configuration document and raise on the first error."""
    validator = Draft7Validator(CONFIG_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ConfigError(f"Invalid configuration at '{path}': {first.message}")


def find_user_config(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Search ``start_dir`` and its parents for a user configuration file."""
    names = set(Constants.USER_CONFIG_FILES)
    return find_file_up(Path(start_dir or Path.cwd()), lambda f: f.name in names)


def load_config(path: Optional[str] = None, start_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Load and validate the user configuration.

    Args:
        path: Explicit configuration file (YAML, or JSON by extension).
        start_dir: Where the upward search starts when ``path`` is not given.

    Returns:
        The validated configuration, or an empty dict when none was found.

    Raises:
        ConfigError: the file is missing, unreadable or invalid.
    """
    if path:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = find_user_config(start_dir)
        if config_path is None:
            return {}

    logger.debug("Loading configuration from %s", config_path)
    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            if config_path.suffix.lower() == ".json":
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config {config_path}: {exc}") from exc

    if data is None:
        return {}
    validate_config(data)
    return data


def apply_config_overrides(cfg: Dict[str, Any]) -> None:
    """Apply a validated configuration onto ``Constants``."""
    for key, attr in _TOP_LEVEL.items():
        if key in cfg:
            value = cfg[key]
            setattr(Constants, attr, list(value) if isinstance(value, list) else value)
    for key, attr in _HTTP.items():
        if key in cfg.get("http", {}):
            setattr(Constants, attr, cfg["http"][key])


def apply_cli_overrides(args) -> None:
    """Apply CLI overrides; these take precedence over the config file."""
    if getattr(args, "SNAPSHOT_INDEX_URL", None):
        Constants.SNAPSHOT_INDEX_URL = args.SNAPSHOT_INDEX_URL
