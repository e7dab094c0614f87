"""
User configuration file support.

Reads/writes ``~/.netdash/config.json``.

Supported keys::

    ping_count = 5            # sequential latency probes
    ping_url = "..."          # lightweight latency resource
    download_url = "..."      # throughput resource
    download_size = 5000000   # bytes served by download_url
    concurrency = 4           # probes per throughput batch
    time_budget = 6.0         # seconds for the throughput phase
    probe_timeout = 15.0      # seconds a probe socket may stay idle
    ramp_steps = 20
    ramp_interval = 0.05
    history_file = ""         # key-value store path ("" = default)
    log_level = "WARNING"
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .constants import (
    DEFAULT_CONNECTIONS,
    DEFAULT_PING_COUNT,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_TIME_BUDGET,
    DOWNLOAD_SIZE,
    DOWNLOAD_URL,
    MAX_CONNECTIONS,
    MAX_PING_COUNT,
    MAX_TIME_BUDGET,
    MIN_CONNECTIONS,
    MIN_PING_COUNT,
    MIN_TIME_BUDGET,
    PING_URL,
    RAMP_INTERVAL,
    RAMP_STEPS,
)
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(Path.home(), ".netdash")
_CONFIG_FILE = "config.json"


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "ping_count": DEFAULT_PING_COUNT,
    "ping_url": PING_URL,
    "download_url": DOWNLOAD_URL,
    "download_size": DOWNLOAD_SIZE,
    "concurrency": DEFAULT_CONNECTIONS,
    "time_budget": DEFAULT_TIME_BUDGET,
    "probe_timeout": DEFAULT_PROBE_TIMEOUT,
    "ramp_steps": RAMP_STEPS,
    "ramp_interval": RAMP_INTERVAL,
    "history_file": "",
    "log_level": "WARNING",
}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
        if isinstance(user, dict):
            config.update(user)
    except (json.JSONDecodeError, IOError) as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)

    return config


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path


def get_config_value(key: str) -> Any:
    """Get a single config value."""
    return load_config().get(key, DEFAULTS.get(key))


def set_config_value(key: str, value: Any) -> str:
    """Set a single config value and persist.  Returns file path."""
    config = load_config()
    config[key] = value
    return save_config(config)


def config_path() -> str:
    """Return the config file path (for display purposes)."""
    return _config_path()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_config(config: Dict[str, Any]) -> None:
    """Raise ``ConfigError`` if any value is out of range."""
    try:
        ping_count = int(config["ping_count"])
        concurrency = int(config["concurrency"])
        time_budget = float(config["time_budget"])
        download_size = int(config["download_size"])
        probe_timeout = float(config["probe_timeout"])
        ramp_steps = int(config["ramp_steps"])
        ramp_interval = float(config["ramp_interval"])
    except KeyError as exc:
        raise ConfigError(f"Missing config key: {exc.args[0]}") from None
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from None

    if not MIN_PING_COUNT <= ping_count <= MAX_PING_COUNT:
        raise ConfigError(f"Ping count must be between {MIN_PING_COUNT} and {MAX_PING_COUNT}")
    if not MIN_CONNECTIONS <= concurrency <= MAX_CONNECTIONS:
        raise ConfigError(f"Connections must be between {MIN_CONNECTIONS} and {MAX_CONNECTIONS}")
    if not MIN_TIME_BUDGET <= time_budget <= MAX_TIME_BUDGET:
        raise ConfigError(
            f"Test duration must be between {MIN_TIME_BUDGET} and {MAX_TIME_BUDGET} s"
        )
    if download_size <= 0:
        raise ConfigError("Download size must be positive")
    if probe_timeout <= 0:
        raise ConfigError("Probe timeout must be positive")
    if ramp_steps < 1:
        raise ConfigError("Ramp steps must be at least 1")
    if ramp_interval < 0:
        raise ConfigError("Ramp interval must not be negative")
    if not config.get("ping_url") or not config.get("download_url"):
        raise ConfigError("ping_url and download_url must be set")
