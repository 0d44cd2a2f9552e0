"""Locked access to the append-only tap log file."""

from __future__ import annotations

import fcntl
import logging
from pathlib import Path
from typing import TextIO

from tap.config import log_path
from tap.errors import StoreError
from tap.log import Record

logger = logging.getLogger(__name__)


class LogStore:
    """Append-only log file held under an exclusive advisory lock.

    The lock is taken on open and released on close, so a read followed by an
    append is not interleaved with another tap process. Not thread-safe.
    """

    def __init__(self, file: TextIO, path: Path) -> None:
        self._file = file
        self.path = path

    def __enter__(self) -> "LogStore":
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the lock and close the file."""
        if self._file.closed:
            return
        try:
            fcntl.flock(self._file.fileno(), fcntl.LOCK_UN)
        finally:
            self._file.close()

    @classmethod
    def open(cls, store_dir: Path, *, shared: bool = False) -> LogStore:
        """Open or create ``log.txt`` in the store directory and lock it.

        Args:
            store_dir: Directory holding the log.
            shared: Take a shared lock for read-only queries instead of an
                exclusive one.
        """
        path = log_path(store_dir)
        try:
            f = path.open("a+", encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Couldn't open {path}: {e}") from e
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH if shared else fcntl.LOCK_EX)
        except OSError as e:
            f.close()
            raise StoreError(f"Couldn't lock {path}: {e}") from e
        logger.debug("Opened %s", path)
        return cls(f, path)

    def read(self) -> str:
        """Return the full log text."""
        try:
            self._file.seek(0)
            return self._file.read()
        except UnicodeDecodeError as e:
            raise StoreError(f"Couldn't read {self.path}: not valid UTF-8 at byte {e.start}") from e
        except OSError as e:
            raise StoreError(f"Couldn't read {self.path}: {e}") from e

    def append(self, record: Record) -> None:
        """Append one record as a new line."""
        line = record.to_line()
        text = self.read()
        if text and not text.endswith("\n"):
            line = "\n" + line
        try:
            self._file.write(line + "\n")
            self._file.flush()
        except OSError as e:
            raise StoreError(f"Couldn't write to {self.path}: {e}") from e
        logger.debug("Appended %r to %s", record.to_line(), self.path)
