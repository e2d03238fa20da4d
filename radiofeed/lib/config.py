"""
Shared configuration loader for radiofeed.

Loads a single JSON config file.  Search order:
  1. $RADIOFEED_CONFIG              (explicit path, if set)
  2. /etc/radiofeed/config.json     (deployed install)
  3. config.json                    (CWD, handy for local dev)
  4. ../../config/default.json      (repo fallback)

Upstream URLs and timeouts live here; there are no runtime flags.

Usage:
    from radiofeed.lib.config import cfg

    station_name = cfg("station", "name", default="Radio Habblive")
    now_timeout  = cfg("timeouts", "now", default=5)
    relays       = cfg("relays", default=[])  # returns the whole list
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

_config: dict | None = None

_SEARCH_PATHS = [
    "/etc/radiofeed/config.json",
    "config.json",
    os.path.join(os.path.dirname(__file__), "..", "..", "config", "default.json"),
]


def _search_paths() -> list[str]:
    explicit = os.environ.get("RADIOFEED_CONFIG")
    return ([explicit] if explicit else []) + _SEARCH_PATHS


def _validate(config: dict, path: str) -> None:
    """Warn about missing or suspicious config values."""
    station = config.get("station") or {}
    for key in ("status_url", "now_url", "stream_url"):
        if not station.get(key):
            logger.warning("Config %s: missing station.%s", path, key)
    relays = config.get("relays")
    if not relays:
        logger.warning("Config %s: no relays configured, status page will only be fetched directly", path)
    else:
        for i, relay in enumerate(relays):
            url = relay.get("url", "") if isinstance(relay, dict) else ""
            if "{url}" not in url and "{raw}" not in url:
                logger.warning("Config %s: relay #%d has no {url} or {raw} placeholder", path, i)
    interval = (config.get("poll") or {}).get("interval")
    if interval is not None and interval <= 0:
        logger.warning("Config %s: poll.interval must be positive, got %s", path, interval)


def load_config() -> dict:
    """Load config from the first JSON file found. Cached after first call."""
    global _config
    if _config is not None:
        return _config

    for path in _search_paths():
        try:
            with open(path) as f:
                _config = json.load(f)
                logger.info("Config loaded from %s", path)
                _validate(_config, path)
                return _config
        except FileNotFoundError:
            continue
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            continue

    logger.warning("No config.json found, using built-in defaults")
    _config = {}
    return _config


def cfg(section: str, key: str | None = None, *, default=None):
    """Read a config value.

    cfg("relays")                    → config["relays"]
    cfg("station", "now_url")        → config["station"]["now_url"]
    cfg("timeouts", "now", default=5) → config["timeouts"]["now"] or 5
    """
    config = load_config()
    val = config.get(section)
    if key is None:
        return val if val is not None else default
    if isinstance(val, dict):
        return val.get(key, default)
    return default


def reload_config():
    """Force re-read from disk (for testing or hot-reload)."""
    global _config
    _config = None
    return load_config()
