"""Shared file helpers for the JSON-backed repositories.

Every repository opening the same path shares one ``StoreLock``.  It
combines a re-entrant thread lock with an exclusive ``flock`` on a
sidecar ``.<name>.lock`` file, so a read-modify-write done while holding
``lock`` is atomic with respect to other threads and other processes
(every CLI invocation is its own process).

Writes go to a temporary file in the same directory that then replaces
the store, so a crash mid-write never leaves a truncated store behind.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, IO

_locks: dict[Path, StoreLock] = {}
_locks_guard = threading.Lock()


class StoreLock:
    """Re-entrant lock held across threads and processes for one store file."""

    def __init__(self, lock_path: Path) -> None:
        self._lock_path = lock_path
        self._thread_lock = threading.RLock()
        self._depth = 0
        self._lock_file: IO[str] | None = None

    def __enter__(self) -> StoreLock:
        self._thread_lock.acquire()
        try:
            # flock is per open file, so only the outermost holder takes it
            if self._depth == 0:
                self._lock_file = self._acquire_file_lock()
            self._depth += 1
        except BaseException:
            self._thread_lock.release()
            raise
        return self

    def __exit__(self, *exc_info: object) -> None:
        try:
            self._depth -= 1
            if self._depth == 0 and self._lock_file is not None:
                fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
                self._lock_file.close()
                self._lock_file = None
        finally:
            self._thread_lock.release()

    def _acquire_file_lock(self) -> IO[str]:
        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock_file = open(self._lock_path, "w")
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        except BaseException:
            lock_file.close()
            raise
        return lock_file


def _lock_for(path: Path) -> StoreLock:
    with _locks_guard:
        if path not in _locks:
            _locks[path] = StoreLock(path.with_name(f".{path.name}.lock"))
        return _locks[path]


class JsonFile:

    def __init__(self, file_path: Path, empty: str = "[]") -> None:
        self._file_path = file_path
        self._empty = empty
        self.lock = _lock_for(file_path.resolve())
        self._ensure_file()

    def load(self) -> Any:
        with self.lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, data: Any) -> None:
        with self.lock:
            self._write_atomically(json.dumps(data, indent=2) + "\n")

    def _write_atomically(self, text: str) -> None:
        fd, temp_path = tempfile.mkstemp(
            dir=self._file_path.parent, prefix=f".{self._file_path.stem}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(temp_path, self._file_path)
        except BaseException:
            os.unlink(temp_path)
            raise

    def _ensure_file(self) -> None:
        with self.lock:
            if not self._file_path.exists():
                self._file_path.parent.mkdir(parents=True, exist_ok=True)
                self._write_atomically(self._empty)
