from __future__ import annotations

"""Configuration loading and validation for mathsprint.

Loads YAML configuration, applies defaults, and sanitises values. Invalid
values are logged and replaced by their default rather than aborting.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError
from ..results.schema import Configuration, OPERATOR_FLAGS

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).with_name("defaults.yml")


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or the packaged defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    return _load_yaml(Path(path) if path else DEFAULTS_PATH)


def _positive_int(section: Dict[str, Any], name: str, default: int) -> None:
    value = section.get(name, default)
    try:
        n = int(value)
    except (TypeError, ValueError):
        n = 0
    if n <= 0:
        logger.warning("Invalid %s=%r, using %d", name, value, default)
        n = default
    section[name] = n


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    for name in ("round", "feedback", "history", "leaderboard", "defaults"):
        if not isinstance(cfg.get(name), dict):
            cfg[name] = {}

    rnd = cfg["round"]
    feedback = cfg["feedback"]
    history = cfg["history"]
    board = cfg["leaderboard"]
    defaults = cfg["defaults"]

    _positive_int(rnd, "seconds", 60)
    _positive_int(rnd, "tick_ms", 1000)
    _positive_int(feedback, "correct_delay_ms", 150)
    _positive_int(feedback, "wrong_delay_ms", 400)
    _positive_int(history, "cap", 50)
    _positive_int(board, "top_n", 10)
    _positive_int(board, "missed_shown", 3)

    history.setdefault("path", "./mathsprint_data")
    history.setdefault("key", "mathsprint.history")
    history["path"] = str(history["path"])
    history["key"] = str(history["key"])

    ops = defaults.get("operators")
    ops = dict(ops) if isinstance(ops, dict) else {}
    for flag in OPERATOR_FLAGS:
        ops[flag] = bool(ops.get(flag, True))
    if not any(ops.values()):
        logger.warning("No operator enabled in defaults, enabling 'add'")
        ops["add"] = True
    defaults["operators"] = ops

    mods = defaults.get("modifiers")
    mods = dict(mods) if isinstance(mods, dict) else {}
    mods["negatives"] = bool(mods.get("negatives", False))
    mods["doubleDigits"] = bool(mods.get("doubleDigits", mods.pop("double_digits", False)))
    defaults["modifiers"] = mods

    return cfg


def initial_configuration(cfg: Dict[str, Any]) -> Configuration:
    """Build the starting operator/modifier flags from validated config."""
    d = cfg["defaults"]
    return Configuration.model_validate({**d["operators"], **d["modifiers"]})
