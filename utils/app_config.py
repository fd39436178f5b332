"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores settings that must be known before opening the DB (db_folder, log_level).
Config lives in ~/.finance_tracker/config.json to avoid a bootstrapping problem.
"""
import json
import logging
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".finance_tracker"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_LOG_LEVEL = "INFO"

logger = logging.getLogger(__name__)


def load_config() -> dict:
    """Returns {} on missing or corrupt file. Never raises."""
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", CONFIG_FILE, e)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    tmp = CONFIG_FILE.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, CONFIG_FILE)
    except OSError as e:
        logger.error("Could not save config to %s: %s", CONFIG_FILE, e)
        tmp.unlink(missing_ok=True)


def get_db_folder() -> str | None:
    """Return config["db_folder"] or None if not set."""
    return load_config().get("db_folder")


def set_db_folder(path: str | None) -> None:
    """Update db_folder in config and save."""
    config = load_config()
    if path is None:
        config.pop("db_folder", None)
    else:
        config["db_folder"] = path
    save_config(config)


def get_log_level() -> str:
    """Log level name from config, overridable with FINANCE_TRACKER_LOG_LEVEL."""
    level = os.environ.get("FINANCE_TRACKER_LOG_LEVEL") or load_config().get("log_level")
    return str(level or DEFAULT_LOG_LEVEL).upper()
