"""Typed caches binding an in-memory value to a backing file.

A cache loads its value when constructed. A missing, unreadable or
corrupt file never fails construction: the value falls back to the type's
default and ``load_result`` records what happened. Every later operation
is explicit and raises on failure, leaving the in-memory value as it was.
"""

from __future__ import annotations

import copy
import errno
import logging
import operator
import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from ldc.codecs import Codec, JsonCodec, PickleCodec
from ldc.config import CacheSettings, get_settings
from ldc.errors import CacheError, CacheIOError, CacheMergeError
from ldc.file_handle import FileHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Types whose ``+`` concatenates, so appending needs no explicit merge
CONCATENABLE_TYPES: tuple[type, ...] = (str, bytes, list, tuple)


class LoadStatus(str, Enum):
    """How a cache obtained its initial value."""

    FRESH_DEFAULT = "fresh_default"
    LOADED_FROM_DISK = "loaded_from_disk"
    RECOVERED_FROM_CORRUPTION = "recovered_from_corruption"


@dataclass(frozen=True)
class LoadResult:
    """Outcome of the load performed at construction."""

    status: LoadStatus
    error: CacheError | None = None

    @property
    def from_disk(self) -> bool:
        return self.status is LoadStatus.LOADED_FROM_DISK

    @property
    def data_lost(self) -> bool:
        """True when a file existed but its contents could not be used."""
        return self.status is LoadStatus.RECOVERED_FROM_CORRUPTION


class TypedCache(Generic[T]):
    """A value of ``value_type`` persisted to one file through a codec.

    Subclasses choose the codec; a custom one can also be passed directly.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        value_type: type[T],
        *,
        codec: Codec[T],
        default: Callable[[], T] | None = None,
        settings: CacheSettings | None = None,
    ):
        self._handle = FileHandle(path)
        self._value_type = value_type
        self._codec = codec
        self._settings = settings or get_settings()
        self._data, self._load_result = self._load(default or value_type)

    @classmethod
    def open(cls, path: str | os.PathLike[str], value_type: type[T], **kwargs: Any):
        """Construct a cache and return it together with its load outcome."""
        cache = cls(path, value_type, **kwargs)
        return cache, cache.load_result

    def _load(self, default: Callable[[], T]) -> tuple[T, LoadResult]:
        try:
            value = self._codec.decode(self._handle.read())
        except CacheIOError as e:
            if e.errno == errno.ENOENT:
                logger.debug(f"No cache file at {self.path}, starting from default")
                return default(), LoadResult(LoadStatus.FRESH_DEFAULT)
            logger.warning(f"Cannot read cache file {self.path}, using default: {e}")
            return default(), LoadResult(LoadStatus.RECOVERED_FROM_CORRUPTION, e)
        except CacheError as e:
            logger.warning(f"Corrupt cache file {self.path}, using default: {e}")
            return default(), LoadResult(LoadStatus.RECOVERED_FROM_CORRUPTION, e)

        logger.debug(f"Loaded {self._value_type.__name__} from {self.path}")
        return value, LoadResult(LoadStatus.LOADED_FROM_DISK)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({str(self.path)!r}, "
            f"{self._value_type.__name__}, data={self._data!r})"
        )

    @property
    def path(self) -> Path:
        return self._handle.path

    @property
    def value_type(self) -> type[T]:
        return self._value_type

    @property
    def load_result(self) -> LoadResult:
        return self._load_result

    @property
    def data(self) -> T:
        """Live in-memory value. Changes are not persisted until ``write``."""
        return self._data

    @data.setter
    def data(self, value: T) -> None:
        self.set_data(value)

    def set_data(self, value: T) -> None:
        if not isinstance(value, self._value_type):
            raise TypeError(
                f"{type(self).__name__} holds {self._value_type.__name__}, "
                f"got {type(value).__name__}"
            )
        self._data = value

    def get_data(self) -> T:
        """Return a deep copy of the in-memory value."""
        return copy.deepcopy(self._data)

    def read(self) -> T:
        """Reload the value from disk and return a copy of it.

        Raises:
            CacheIOError: If the file cannot be read.
            CacheDecodeError: If its contents do not decode as ``value_type``.
        """
        value = self._codec.decode(self._handle.read())
        self._data = value
        return copy.deepcopy(value)

    def write(self) -> None:
        """Persist the in-memory value.

        Raises:
            CacheEncodeError: If the value cannot be encoded; the file is untouched.
            CacheIOError: If the file cannot be written.
        """
        self._persist(self._data)

    def _persist(self, value: T) -> None:
        payload = self._codec.encode(value)
        if self._settings.atomic_writes:
            self._handle.write_atomic(payload, fsync=self._settings.fsync)
        else:
            self._handle.write(payload)

    def delete(self) -> None:
        """Remove the backing file. The in-memory value is kept."""
        self._handle.delete()

    def exists(self) -> bool:
        return self._handle.exists()


class CacheFile(TypedCache[T]):
    """Binary cache for any picklable value.

    Example:
        counter = CacheFile("counter.bin", int)
        counter.data += 1
        counter.write()
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        value_type: type[T],
        *,
        default: Callable[[], T] | None = None,
        merge: Callable[[T, T], T] | None = None,
        settings: CacheSettings | None = None,
    ):
        settings = settings or get_settings()
        super().__init__(
            path,
            value_type,
            codec=PickleCodec(value_type, protocol=settings.pickle_protocol),
            default=default,
            settings=settings,
        )
        self._merge = merge

    def append(self, value: T, merge: Callable[[T, T], T] | None = None) -> None:
        """Combine ``value`` with the stored value and persist the result.

        The stored value is re-read from disk first, so the file must exist.
        The in-memory value is replaced only once the combined value has
        been persisted. ``merge`` defaults to the one given at construction,
        then to ``+`` for str, bytes, list and tuple values.

        Raises:
            CacheIOError: If the file is missing or cannot be written.
            CacheDecodeError: If the stored value cannot be decoded.
            CacheMergeError: If no merge applies or it does not yield a ``value_type``.
            CacheEncodeError: If the combined value cannot be encoded.
        """
        merge_fn = merge or self._merge or self._default_merge()
        current = self._codec.decode(self._handle.read())

        try:
            combined = merge_fn(current, value)
        except Exception as e:
            raise CacheMergeError(f"Merge failed for {self.path}: {e}") from e
        if not isinstance(combined, self._value_type):
            raise CacheMergeError(
                f"Merge produced {type(combined).__name__}, "
                f"expected {self._value_type.__name__}"
            )

        self._persist(combined)
        self._data = combined

    def _default_merge(self) -> Callable[[T, T], T]:
        if issubclass(self._value_type, CONCATENABLE_TYPES):
            return operator.add
        raise CacheMergeError(
            f"No merge function for {self._value_type.__name__}; "
            "pass merge= to append or to the constructor"
        )


class CacheConfig(TypedCache[T]):
    """Human-readable JSON cache for configuration records.

    Example:
        @dataclass
        class Profile:
            name: str = ""
            count: int = 0

        profile = CacheConfig("profile.json", Profile)
        profile.config.count += 1
        profile.write()
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        value_type: type[T],
        *,
        default: Callable[[], T] | None = None,
        settings: CacheSettings | None = None,
    ):
        settings = settings or get_settings()
        super().__init__(
            path,
            value_type,
            codec=JsonCodec(value_type, indent=settings.json_indent),
            default=default,
            settings=settings,
        )

    @property
    def config(self) -> T:
        return self.data

    @config.setter
    def config(self, value: T) -> None:
        self.set_data(value)

    def get_config(self) -> T:
        return self.get_data()
