"""Error types raised by LDC caches and file handles."""

from __future__ import annotations

from pathlib import Path


class CacheError(Exception):
    """Base class for every error raised by LDC."""


class CacheIOError(CacheError, OSError):
    """A file-system operation on a cache path failed.

    Behaves like the wrapped ``OSError`` (``errno``, ``strerror`` and
    ``filename`` are preserved) so callers can catch either type.
    """

    def __init__(self, operation: str, path: Path | str, cause: OSError):
        super().__init__(cause.errno, cause.strerror or str(cause), str(path))
        self.operation = operation
        self.path = Path(path)

    def __str__(self) -> str:
        return f"{self.operation} failed for {self.path}: {self.strerror}"


class CacheDecodeError(CacheError):
    """Stored bytes could not be decoded into the expected value type."""


class CacheEncodeError(CacheError):
    """The in-memory value could not be serialized."""


class CacheMergeError(CacheError):
    """An appended value could not be combined with the stored one."""
