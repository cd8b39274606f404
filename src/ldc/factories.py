"""Shortcuts for common cache types."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TypeVar

from ldc.cache import CacheConfig, CacheFile
from ldc.config import get_settings
from ldc.errors import CacheIOError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cache_file_string(path: str | os.PathLike[str]) -> CacheFile[str]:
    return CacheFile(path, str)


def cache_file_integer(path: str | os.PathLike[str]) -> CacheFile[int]:
    return CacheFile(path, int)


def cache_file_float(path: str | os.PathLike[str]) -> CacheFile[float]:
    return CacheFile(path, float)


def cache_file_bool(path: str | os.PathLike[str]) -> CacheFile[bool]:
    return CacheFile(path, bool)


def cache_config(path: str | os.PathLike[str], value_type: type[T]) -> CacheConfig[T]:
    return CacheConfig(path, value_type)


def cache_folder(path: str | os.PathLike[str] | None = None) -> Path:
    """Ensure a cache directory exists, creating missing parents.

    Args:
        path: Directory to create. Defaults to the configured cache directory.

    Returns:
        The directory path.

    Raises:
        CacheIOError: If the directory cannot be created.
    """
    folder = Path(path).expanduser() if path is not None else get_settings().resolved_cache_dir()
    if not folder.exists():
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheIOError("mkdir", folder, e) from e
        logger.debug(f"Created cache folder {folder}")
    return folder
