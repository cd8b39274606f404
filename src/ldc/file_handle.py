"""Raw byte I/O bound to a single file path."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ldc.errors import CacheIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileMetadata:
    """File-system metadata for a cache file."""

    size: int
    modified: datetime
    accessed: datetime
    changed: datetime
    mode: int  # permission bits only
    readonly: bool

    @classmethod
    def from_stat(cls, st: os.stat_result) -> FileMetadata:
        return cls(
            size=st.st_size,
            modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            accessed=datetime.fromtimestamp(st.st_atime, tz=timezone.utc),
            changed=datetime.fromtimestamp(st.st_ctime, tz=timezone.utc),
            mode=stat.S_IMODE(st.st_mode),
            readonly=not st.st_mode & stat.S_IWUSR,
        )


@contextmanager
def _wrap_os_errors(operation: str, path: Path) -> Iterator[None]:
    try:
        yield
    except OSError as e:
        raise CacheIOError(operation, path, e) from e


class FileHandle:
    """Blocking read/write/append access to one file.

    The file does not need to exist when the handle is created. Every
    operation goes straight to the file system; ``last_read`` is kept for
    inspection only.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self._path = Path(path)
        self.last_read: bytes | None = None

    def __repr__(self) -> str:
        return f"FileHandle({str(self._path)!r})"

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> bytes:
        """Read the whole file.

        Raises:
            CacheIOError: If the file is missing or unreadable.
        """
        with _wrap_os_errors("read", self._path):
            with open(self._path, "rb") as f:
                content = f.read()
        self.last_read = content
        logger.debug(f"Read {len(content)} bytes from {self._path}")
        return content

    def write(self, data: bytes) -> None:
        """Create or truncate the file and write ``data`` in place."""
        with _wrap_os_errors("write", self._path):
            with open(self._path, "wb") as f:
                f.write(data)
                f.flush()
        logger.debug(f"Wrote {len(data)} bytes to {self._path}")

    def write_atomic(self, data: bytes, fsync: bool = True) -> None:
        """Write ``data`` to a temporary sibling, then rename it over the file.

        Readers never observe a half-written file. The temporary file is
        removed if any step fails.
        """
        temp_path = self._path.with_name(self._path.name + ".tmp")
        with _wrap_os_errors("write", self._path):
            try:
                with open(temp_path, "wb") as f:
                    f.write(data)
                    f.flush()
                    if fsync:
                        os.fsync(f.fileno())
                os.replace(temp_path, self._path)
            except OSError:
                temp_path.unlink(missing_ok=True)
                raise
        logger.debug(f"Atomically wrote {len(data)} bytes to {self._path}")

    def append(self, data: bytes) -> None:
        """Append ``data`` to an existing file.

        Raises:
            CacheIOError: If the file does not exist; append never creates it.
        """
        with _wrap_os_errors("append", self._path):
            fd = os.open(self._path, os.O_WRONLY | os.O_APPEND)
            with os.fdopen(fd, "ab") as f:
                f.write(data)
        logger.debug(f"Appended {len(data)} bytes to {self._path}")

    def delete(self) -> None:
        with _wrap_os_errors("delete", self._path):
            self._path.unlink()
        logger.debug(f"Deleted {self._path}")

    def exists(self) -> bool:
        # os.path.exists never raises, unlike Path.exists before 3.12
        return os.path.exists(self._path)

    def copy_to(self, destination: str | os.PathLike[str]) -> Path:
        """Copy the file (with its metadata) and return the path of the copy.

        A directory destination receives a file with the same name.
        """
        with _wrap_os_errors("copy", self._path):
            copied = shutil.copy2(self._path, destination)
        return Path(copied)

    def move_to(self, destination: str | os.PathLike[str]) -> Path:
        """Rename the file to ``destination``.

        The handle keeps pointing at its original path. Moves across
        devices are not supported and raise ``CacheIOError``.
        """
        dest = Path(destination)
        with _wrap_os_errors("move", self._path):
            os.rename(self._path, dest)
        return dest

    def metadata(self) -> FileMetadata:
        with _wrap_os_errors("stat", self._path):
            st = os.stat(self._path)
        return FileMetadata.from_stat(st)
