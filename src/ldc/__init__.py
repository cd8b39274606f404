"""LDC: typed local data caches persisted to single files."""

import logging

from .cache import CacheConfig, CacheFile, LoadResult, LoadStatus, TypedCache
from .codecs import Codec, JsonCodec, PickleCodec
from .config import CacheSettings, get_settings, load_settings
from .errors import (
    CacheDecodeError,
    CacheEncodeError,
    CacheError,
    CacheIOError,
    CacheMergeError,
)
from .factories import (
    cache_config,
    cache_file_bool,
    cache_file_float,
    cache_file_integer,
    cache_file_string,
    cache_folder,
)
from .file_handle import FileHandle, FileMetadata
from .logging_config import setup_logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Caches
    "TypedCache",
    "CacheFile",
    "CacheConfig",
    "LoadStatus",
    "LoadResult",
    # File I/O
    "FileHandle",
    "FileMetadata",
    # Codecs
    "Codec",
    "PickleCodec",
    "JsonCodec",
    # Errors
    "CacheError",
    "CacheIOError",
    "CacheDecodeError",
    "CacheEncodeError",
    "CacheMergeError",
    # Shortcuts
    "cache_file_string",
    "cache_file_integer",
    "cache_file_float",
    "cache_file_bool",
    "cache_config",
    "cache_folder",
    # Settings
    "CacheSettings",
    "load_settings",
    "get_settings",
    "setup_logging",
]
