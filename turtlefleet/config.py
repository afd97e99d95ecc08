"""Fleet config loading and validation.

Configs are plain YAML mappings; every section and key is optional and
components fall back to their own defaults.  Call :func:`load_config` to
read and validate in one step, or :func:`validate_config` on a dict you
built yourself.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger("TurtleFleet.Config")

KNOWN_SECTIONS: List[str] = [
    "agent",
    "heading",
    "position",
    "gateway",
    "fleet",
    "simulation",
    "logging",
]

# section → keys that must be > 0 when present
POSITIVE_KEYS: Dict[str, List[str]] = {
    "agent": ["tick_interval_s", "theta_tolerance", "distance_tolerance"],
    "heading": ["max_angular_velocity"],
    "position": ["max_linear_velocity"],
    "gateway": ["service_timeout_s"],
    "simulation": ["publish_interval_s", "time_scale", "arena_size"],
}

# section → keys that must be >= 0 when present
NON_NEGATIVE_KEYS: Dict[str, List[str]] = {
    "heading": ["kp", "ki", "kd"],
    "position": ["kp", "ki", "kd"],
    "fleet": ["settle_delay_s", "first_index"],
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised by :func:`load_config` when the file is unusable."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Any) -> Tuple[bool, List[str]]:
    """Validate a loaded config dict.

    Returns:
        A ``(is_valid, errors)`` tuple.  ``is_valid`` is ``True`` only when
        ``errors`` is empty.

    Example::

        ok, errors = validate_config(config)
        if not ok:
            for msg in errors:
                logger.error("Config error: %s", msg)
    """
    if not isinstance(config, dict):
        return False, ["Config must be a mapping (check YAML syntax)"]

    errors: List[str] = []

    for key in config:
        if key not in KNOWN_SECTIONS:
            logger.warning(f"Unknown config section '{key}' ignored")

    for section in KNOWN_SECTIONS:
        block = config.get(section)
        if block is not None and not isinstance(block, dict):
            errors.append(f"'{section}' must be a mapping (dict), not a scalar")

    # ── numeric ranges ────────────────────────────────────────────────────────
    for section, keys in POSITIVE_KEYS.items():
        block = config.get(section)
        if not isinstance(block, dict):
            continue
        for key in keys:
            if key in block and not (_is_number(block[key]) and block[key] > 0):
                errors.append(f"'{section}.{key}' must be a positive number")

    for section, keys in NON_NEGATIVE_KEYS.items():
        block = config.get(section)
        if not isinstance(block, dict):
            continue
        for key in keys:
            if key in block and not (_is_number(block[key]) and block[key] >= 0):
                errors.append(f"'{section}.{key}' must be a non-negative number")

    # ── fleet block ───────────────────────────────────────────────────────────
    fleet = config.get("fleet")
    if isinstance(fleet, dict) and "home" in fleet:
        home = fleet["home"]
        if not (isinstance(home, (list, tuple)) and len(home) == 2 and all(map(_is_number, home))):
            errors.append("'fleet.home' must be a pair of numbers [x, y]")

    # ── logging block ─────────────────────────────────────────────────────────
    log_cfg = config.get("logging")
    if isinstance(log_cfg, dict) and "level" in log_cfg:
        if str(log_cfg["level"]).upper() not in LOG_LEVELS:
            errors.append(f"'logging.level' must be one of {', '.join(LOG_LEVELS)}")

    return len(errors) == 0, errors


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Read and validate a YAML config file.

    ``None`` returns an empty config (all defaults).  An empty file is
    treated the same way.

    Raises:
        ConfigError: If the YAML is malformed or validation fails.
    """
    if path is None:
        return {}
    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError([f"{path}: invalid YAML ({exc})"]) from exc
    if config is None:
        config = {}

    ok, errors = validate_config(config)
    if not ok:
        for msg in errors:
            logger.error(f"Config error: {msg}")
        raise ConfigError(errors)
    logger.debug(f"Loaded config from {path}")
    return config
