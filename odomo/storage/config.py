"""Global app configuration (starting balance, game tuning overrides)."""

import json
from pathlib import Path
from typing import Any

from .core import data_dir, write_json_atomic

_CONFIG_DEFAULTS: dict[str, Any] = {
    "starting_balance": 0,
    "tuning": {},
}


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = {
        "starting_balance": _CONFIG_DEFAULTS["starting_balance"],
        "tuning": json.loads(json.dumps(_CONFIG_DEFAULTS["tuning"])),
    }
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        if stored.get("starting_balance") is not None:
            config["starting_balance"] = stored["starting_balance"]
        if isinstance(stored.get("tuning"), dict):
            config["tuning"].update(stored["tuning"])
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config.

    `tuning` is merged key by key. A null `starting_balance` or tuning key
    resets that setting to its default.
    """
    config = get_config()
    if "starting_balance" in fields:
        balance = fields["starting_balance"]
        config["starting_balance"] = _CONFIG_DEFAULTS["starting_balance"] if balance is None else balance
    if isinstance(fields.get("tuning"), dict):
        for key, value in fields["tuning"].items():
            if value is None:
                config["tuning"].pop(key, None)
            else:
                config["tuning"][key] = value
    write_json_atomic(_config_path(), config)
    return config
