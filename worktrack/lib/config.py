"""
Configuration loader for worktrack.

Loads engine settings from a worktrack.env file. Every key is optional; bad
values are reported and replaced by their defaults rather than aborting.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import envparse

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "worktrack.env"
CONFIG_ENV_VAR = "WORKTRACK_CONFIG"

DEFAULT_STORE_FILENAME = "items.json"
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0
DEFAULT_ARCHIVE_RETENTION_DAYS = 7.0
DEFAULT_EXPIRY_GRACE_DAYS = 1.0
DEFAULT_LOCK_TIMEOUT_SECONDS = 10.0


@dataclass
class EngineConfig:
    """Engine configuration from worktrack.env"""
    store_path: Path
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    archive_retention_days: float = DEFAULT_ARCHIVE_RETENTION_DAYS
    expiry_grace_days: float = DEFAULT_EXPIRY_GRACE_DAYS
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS
    notifications: bool = True


def _positive_float(env: dict, key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {key} '{raw}', using default {default:g}")
        return default
    if value <= 0:
        logger.warning(f"Invalid {key} '{raw}' (must be > 0), using default {default:g}")
        return default
    return value


def load_config(config_path: Path) -> EngineConfig:
    """Load worktrack.env and return EngineConfig.

    A missing file yields the defaults. A relative STORE_PATH is resolved
    against the directory holding the env file.
    """
    config_path = Path(config_path)
    env = envparse.load_env(config_path, missing_ok=True)
    base_dir = config_path.parent

    store_path = Path(env.get("STORE_PATH") or DEFAULT_STORE_FILENAME).expanduser()
    if not store_path.is_absolute():
        store_path = base_dir / store_path

    notifications = True
    if env.get("NOTIFICATIONS"):
        try:
            notifications = envparse.parse_bool(env["NOTIFICATIONS"])
        except ValueError:
            logger.warning(f"Invalid NOTIFICATIONS '{env['NOTIFICATIONS']}', using default true")

    return EngineConfig(
        store_path=store_path,
        sweep_interval_seconds=_positive_float(
            env, "SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS),
        archive_retention_days=_positive_float(
            env, "ARCHIVE_RETENTION_DAYS", DEFAULT_ARCHIVE_RETENTION_DAYS),
        expiry_grace_days=_positive_float(
            env, "EXPIRY_GRACE_DAYS", DEFAULT_EXPIRY_GRACE_DAYS),
        lock_timeout_seconds=_positive_float(
            env, "LOCK_TIMEOUT_SECONDS", DEFAULT_LOCK_TIMEOUT_SECONDS),
        notifications=notifications,
    )


def resolve_config_path(explicit: str | None = None) -> Path:
    """Pick the config file: explicit argument, then $WORKTRACK_CONFIG, then ./worktrack.env."""
    if explicit:
        return Path(explicit)
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return Path.cwd() / CONFIG_FILENAME
