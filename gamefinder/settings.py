import copy
import json
import logging
from typing import Any, Dict
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "custom_game_paths": [],
    "scan_depth": 3,
    "auto_scan": True,
    "show_hidden_games": False,
    "icon_quality": "high",
    "language": "en",
}

def is_valid_setting(key: str, value) -> bool:
    """A value is valid when it has the shape of the key's default."""
    if key not in DEFAULT_SETTINGS:
        return False
    default = DEFAULT_SETTINGS[key]
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, int):
        # bool is an int subclass
        return isinstance(value, int) and not isinstance(value, bool) and value >= 0
    if isinstance(default, list):
        return isinstance(value, list) and all(isinstance(v, str) for v in value)
    return isinstance(value, type(default))

def load_settings(settings_file: Path) -> Dict:
    default = copy.deepcopy(DEFAULT_SETTINGS)
    try:
        if settings_file.exists():
            data = json.loads(settings_file.read_text("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("settings file does not hold an object")
            for k in default:
                if k not in data:
                    continue
                if is_valid_setting(k, data[k]):
                    default[k] = data[k]
                else:
                    logger.warning("ignoring bad value for %s in %s: %r", k, settings_file, data[k])
    except Exception as e:
        logger.warning("could not read %s, using defaults: %s", settings_file, e)
    return default

def save_settings(settings_file: Path, settings: dict) -> None:
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps(settings, indent=2), encoding="utf-8")

def get_setting(settings_file: Path, key: str, default=None):
    return load_settings(settings_file).get(key, default)

def update_setting(settings_file: Path, key: str, value) -> bool:
    if not is_valid_setting(key, value):
        return False
    settings = load_settings(settings_file)
    settings[key] = value
    save_settings(settings_file, settings)
    return True

def reset_settings(settings_file: Path) -> Dict:
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    save_settings(settings_file, settings)
    return settings

def add_custom_path(settings_file: Path, path: str) -> bool:
    settings = load_settings(settings_file)
    paths = settings["custom_game_paths"]
    if not path or path in paths:
        return False
    paths.append(path)
    save_settings(settings_file, settings)
    return True

def remove_custom_path(settings_file: Path, path: str) -> bool:
    settings = load_settings(settings_file)
    paths = settings["custom_game_paths"]
    if path not in paths:
        return False
    paths.remove(path)
    save_settings(settings_file, settings)
    return True
