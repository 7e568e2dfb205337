"""Small persistent string-keyed store for local-first data.

`LocalKeyValueStore` keeps one text value per key in a file under a data
directory (default: `var/`). It backs the draft snapshot and the flat-list
entry store fallback. Writes are atomic (temp file + replace) and guarded
by an advisory lock file.
"""
from __future__ import annotations

import logging
import os
import re
import time

from app.domain.exceptions import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_VALID_KEY = re.compile(r"^[A-Za-z0-9._-]+$")


class FileLock:
    """Simple file-lock using a lockfile (cross-platform, advisory).

    Suitable for single-writer or low-contention use. It relies on atomic
    creation of a .lock file and retries until timeout.
    """

    def __init__(self, lock_path: str, timeout: float = 5.0, retry: float = 0.05) -> None:
        self.lock_path = lock_path
        self.timeout = float(timeout)
        self.retry = float(retry)
        self._acquired = False

    def acquire(self) -> bool:
        start = time.monotonic()
        while True:
            try:
                # O_EXCL ensures atomic creation; fails if the file exists
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                os.close(fd)
                self._acquired = True
                return True
            except FileExistsError:
                if (time.monotonic() - start) >= self.timeout:
                    return False
                time.sleep(self.retry)

    def release(self) -> None:
        try:
            if self._acquired and os.path.exists(self.lock_path):
                os.unlink(self.lock_path)
        finally:
            self._acquired = False

    def __enter__(self):
        if not self.acquire():
            raise TimeoutError(f"Failed to acquire file lock: {self.lock_path}")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


class LocalKeyValueStore:
    """String values addressed by string keys, one file per key."""

    def __init__(self, directory: str, lock_timeout: float = 5.0) -> None:
        self.directory = directory
        self.lock_timeout = lock_timeout

    def ensure_directory(self) -> None:
        os.makedirs(self.directory, exist_ok=True)

    def _path(self, key: str) -> str:
        if not _VALID_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.directory, f"{key}.json")

    def get_item(self, key: str) -> str | None:
        """Return the stored text, or None when the key was never written."""
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with FileLock(path + ".lock", timeout=self.lock_timeout):
                with open(path, "r", encoding="utf-8") as fh:
                    return fh.read()
        except (OSError, TimeoutError) as e:
            logger.error("Failed to read key %s: %s", key, e)
            raise StorageReadError(f"Could not read {key}", detail={"key": key, "error": str(e)}) from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.ensure_directory()
            with FileLock(path + ".lock", timeout=self.lock_timeout):
                tmp = path + ".tmp"
                with open(tmp, "w", encoding="utf-8") as fh:
                    fh.write(value)
                os.replace(tmp, path)
        except (OSError, TimeoutError) as e:
            logger.error("Failed to write key %s: %s", key, e)
            raise StorageWriteError(f"Could not write {key}", detail={"key": key, "error": str(e)}) from e

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if not os.path.exists(path):
            return
        try:
            with FileLock(path + ".lock", timeout=self.lock_timeout):
                if os.path.exists(path):
                    os.unlink(path)
        except (OSError, TimeoutError) as e:
            logger.error("Failed to remove key %s: %s", key, e)
            raise StorageWriteError(f"Could not remove {key}", detail={"key": key, "error": str(e)}) from e
