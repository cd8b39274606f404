"""Configuration management for LDC.

Supports loading settings from YAML files with sensible defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


@dataclass
class CacheSettings:
    """LDC settings.

    Settings are loaded with the following precedence:
    1. Explicit path passed to ``load_settings``
    2. Project config file (.ldc/config.yaml)
    3. User config file (~/.config/ldc/config.yaml)
    4. Default values (lowest priority)
    """

    # Storage
    cache_dir: str = "~/.cache/ldc"
    atomic_writes: bool = True
    fsync: bool = True

    # Codecs
    json_indent: int | None = 2
    pickle_protocol: int = 4

    # Logging
    log_level: str = "WARNING"

    def resolved_cache_dir(self) -> Path:
        """Return the cache directory with ``~`` expanded."""
        return Path(self.cache_dir).expanduser()

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary (YAML structure)."""
        return {
            "storage": {
                "cache_dir": self.cache_dir,
                "atomic_writes": self.atomic_writes,
                "fsync": self.fsync,
            },
            "codecs": {
                "json_indent": self.json_indent,
                "pickle_protocol": self.pickle_protocol,
            },
            "logging": {
                "level": self.log_level,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CacheSettings:
        """Create settings from dictionary (YAML structure)."""
        storage = data.get("storage", {})
        codecs = data.get("codecs", {})
        log = data.get("logging", {})

        return cls(
            cache_dir=str(storage.get("cache_dir", "~/.cache/ldc")),
            atomic_writes=storage.get("atomic_writes", True),
            fsync=storage.get("fsync", True),
            json_indent=codecs.get("json_indent", 2),
            pickle_protocol=codecs.get("pickle_protocol", 4),
            log_level=str(log.get("level", "WARNING")).upper(),
        )


def _find_config_file() -> Path | None:
    """Find configuration file in standard locations.

    Checks in order:
    1. .ldc/config.yaml (project-level)
    2. ~/.config/ldc/config.yaml (user-level)

    Returns first found path or None.
    """
    project_config = Path.cwd() / ".ldc" / "config.yaml"
    if project_config.exists():
        return project_config

    user_config = Path.home() / ".config" / "ldc" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def load_settings(path: Path | None = None) -> CacheSettings:
    """Load settings from file or use defaults.

    Args:
        path: Optional explicit path to config file.
              If None, searches standard locations.

    Returns:
        CacheSettings with values from file or defaults.
    """
    config_path = path or _find_config_file()

    if config_path is None or not config_path.exists():
        return CacheSettings()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"top-level YAML must be a mapping, got {type(data).__name__}")
        return CacheSettings.from_dict(data)
    except (OSError, yaml.YAMLError, ValueError, AttributeError) as e:
        logger.warning(f"Could not load settings from {config_path}, using defaults: {e}")
        return CacheSettings()


@lru_cache(maxsize=1)
def get_settings() -> CacheSettings:
    """Return process-wide settings, loaded once from the standard locations."""
    return load_settings()
