"""JSON-file-backed implementation of SequenceRepository."""

from __future__ import annotations

from pathlib import Path

from fulfillment.domain.repository.sequence_repository import SequenceRepository
from fulfillment.infrastructure.persistence.json_file import JsonFile


class JsonSequenceRepository(SequenceRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty="{}")

    def increment(self, key: str) -> int:
        with self._file.lock:
            counters = self._file.load()
            value = counters.get(key, 0) + 1
            counters[key] = value
            self._file.persist(counters)
            return value
