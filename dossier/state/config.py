"""
User configuration persistence.

Stores editor settings like the comment timezone in a JSON file
alongside the dossier data.
"""

import json
import logging
from pathlib import Path
from typing import TypedDict

logger = logging.getLogger(__name__)


class Config(TypedDict, total=False):
    """User configuration."""
    comment_timezone: str  # IANA zone used to pin date-only comment timestamps
    default_comment_author: str  # Used when a comment is left without a name
    default_comment_style: str  # NOTE, STAMP, WARNING, MEMO
    max_upload_bytes: int
    universal_label: str  # Tag library group for cross-campaign tags


DEFAULT_CONFIG: Config = {
    "comment_timezone": "UTC",
    "default_comment_author": "Observer",
    "default_comment_style": "NOTE",
    "max_upload_bytes": 20 * 1024 * 1024,
    "universal_label": "Universal",
}


def get_config_path(data_dir: Path | str = "dossier_data") -> Path:
    """Get path to config file."""
    return Path(data_dir) / ".dossier_config.json"


def load_config(data_dir: Path | str = "dossier_data") -> Config:
    """Load config from file, or return defaults if not found."""
    path = get_config_path(data_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        config = DEFAULT_CONFIG.copy()
        config.update(saved)
        return config
    except (json.JSONDecodeError, IOError):
        logger.warning("Unreadable config at %s, using defaults", path)
        return DEFAULT_CONFIG.copy()


def save_config(config: Config, data_dir: Path | str = "dossier_data") -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(data_dir)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        logger.warning("Could not save config to %s: %s", path, e)
        return False


def set_comment_timezone(zone: str, data_dir: Path | str = "dossier_data") -> bool:
    """Save the canonical zone for comment dates."""
    config = load_config(data_dir)
    config["comment_timezone"] = zone
    return save_config(config, data_dir)


def set_default_comment_author(name: str, data_dir: Path | str = "dossier_data") -> bool:
    config = load_config(data_dir)
    config["default_comment_author"] = name
    return save_config(config, data_dir)


def set_max_upload_bytes(limit: int, data_dir: Path | str = "dossier_data") -> bool:
    config = load_config(data_dir)
    config["max_upload_bytes"] = limit
    return save_config(config, data_dir)
