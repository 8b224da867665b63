"""CLI configuration helpers for settings persistence."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

TEXT_SPEEDS = ("slow", "medium", "fast", "instant")

DEFAULT_CONFIG: Dict[str, Any] = {
    "text_speed": "medium",
    "music_enabled": True,
    "sound_enabled": True,
    "autosave_enabled": True,
    "autosave_delay_ms": 500,
}


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "ElPaloDeQueso"
        return Path.home() / "ElPaloDeQueso"
    return Path.home() / ".config" / "el_palo_de_queso"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def get_save_dir() -> Path:
    """Return the per-user save directory."""
    return get_user_data_dir() / "saves"


def _is_bool(value: object) -> bool:
    return isinstance(value, bool)


def _is_delay(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _normalize(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Keep valid values and fall back to the default for each bad or missing key."""
    config = dict(DEFAULT_CONFIG)
    if raw.get("text_speed") in TEXT_SPEEDS:
        config["text_speed"] = raw["text_speed"]
    for key in ("music_enabled", "sound_enabled", "autosave_enabled"):
        if _is_bool(raw.get(key)):
            config[key] = raw[key]
    if _is_delay(raw.get("autosave_delay_ms")):
        config["autosave_delay_ms"] = raw["autosave_delay_ms"]
    return config


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return dict(DEFAULT_CONFIG)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return dict(DEFAULT_CONFIG)
    if not isinstance(raw, dict):
        return dict(DEFAULT_CONFIG)
    return _normalize(raw)


def save_config(config: Dict[str, Any], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(_normalize(config), indent=2, sort_keys=True), encoding="utf-8")
