import logging
import os
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger(__name__)


def find_config_file() -> str:
    """
    Find the configuration file in standard locations.

    Look for config in the following locations (in order):
    1. ./hn_aggregator.toml (current directory)
    2. ~/.config/hn_aggregator/config.toml (user config directory)
    3. /etc/hn_aggregator/config.toml (system config directory)

    Returns:
        Path to the first config file found, or an empty string if none exists
    """
    candidates = [
        Path("./hn_aggregator.toml"),
        Path.home() / ".config" / "hn_aggregator" / "config.toml",
        Path("/etc/hn_aggregator/config.toml"),
    ]
    for candidate in candidates:
        if candidate.exists():
            return str(candidate)
    return ""


def default_config() -> Dict[str, Dict[str, Any]]:
    """Return a fresh copy of the built-in configuration."""
    return {
        "api": {
            "base_url": "https://hacker-news.firebaseio.com/v0",
            "timeout": 10.0,
            "user_agent": "hn-aggregator/0.1",
        },
        "cache": {
            # Unset means unbounded; entries then leave only by expiry
            "maxsize": None,
            "maxitem_ttl": 30,
            "list_ttl": 60,
            "item_ttl": 300,
            "user_ttl": 600,
        },
        "feed": {
            "page_size": 20,
            "max_comment_depth": 4,
            "breadth_cap": 10,
            "rising_candidates": 200,
            "score_fetch_cap": 30,
            "min_comments": 5,
            "min_points": 5,
            "max_workers": 16,
        },
        "logging": {"level": "INFO"},
    }


def load_config(config_path: str = "") -> Dict[str, Any]:
    """
    Load configuration from a TOML file.

    Args:
        config_path: Path to the configuration file. If not provided,
                    the function will search for a config file in standard locations.

    Returns:
        Dictionary with configuration values
    """
    if not config_path:
        config_path = find_config_file()

    config = default_config()

    # If config file exists, load it and merge with defaults
    if config_path and os.path.exists(config_path):
        try:
            user_config = toml.load(config_path)
        except (OSError, toml.TomlDecodeError) as e:
            logger.warning("Error loading config file %s: %s", config_path, e)
            return config

        for section in config:
            if isinstance(user_config.get(section), dict):
                config[section].update(user_config[section])

    return config
