"""Configuration and storage path resolution."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

DB_PATH_ENV = "MAMA_DB_PATH"
BACKEND_ENV = "MAMA_BACKEND"
DATA_DIR_ENV = "MAMA_DATA_DIR"
LOG_LEVEL_ENV = "MAMA_LOG_LEVEL"
CHECKPOINT_THRESHOLD_ENV = "MAMA_CHECKPOINT_THRESHOLD_MS"

DEFAULT_CHECKPOINT_THRESHOLD_MS = 5 * 60 * 1000


def default_db_path() -> str:
    """Fixed fallback storage location under the user's home directory."""
    return str(Path.home() / ".claude" / "mama-memory.db")


def get_data_dir() -> Path:
    """Directory for gateway logs and hook session state."""
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".mama"


@dataclass
class PluginConfig:
    """Gateway configuration.

    Only ``db_path`` is part of the host-facing plugin schema; the other
    fields come from the environment.
    """

    db_path: Optional[str] = None
    backend: Optional[str] = None
    checkpoint_threshold_ms: int = DEFAULT_CHECKPOINT_THRESHOLD_MS
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "PluginConfig":
        """Build a config from the host's raw plugin config, over env defaults."""
        config = get_config()
        if not mapping:
            return config
        db_path = mapping.get("dbPath") or mapping.get("db_path")
        if isinstance(db_path, str) and db_path:
            config.db_path = db_path
        backend = mapping.get("backend")
        if isinstance(backend, str) and backend:
            config.backend = backend
        return config


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default


def get_config() -> PluginConfig:
    """Read gateway configuration from environment variables.

    The storage path is left unset here; ``resolve_db_path`` applies the
    environment override at initialization time.
    """
    return PluginConfig(
        backend=os.environ.get(BACKEND_ENV) or None,
        checkpoint_threshold_ms=_int_env(
            CHECKPOINT_THRESHOLD_ENV, DEFAULT_CHECKPOINT_THRESHOLD_MS
        ),
        log_level=os.environ.get(LOG_LEVEL_ENV, "INFO"),
    )


def resolve_db_path(config: Optional[PluginConfig] = None) -> str:
    """Resolve the storage location.

    Resolution order:
    1. Explicit ``config.db_path``
    2. MAMA_DB_PATH environment variable
    3. ~/.claude/mama-memory.db
    """
    if config is not None and config.db_path:
        return config.db_path

    env_path = os.environ.get(DB_PATH_ENV)
    if env_path:
        return env_path

    return default_db_path()
