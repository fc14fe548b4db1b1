"""Abstract repository for named counters."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SequenceRepository(ABC):

    @abstractmethod
    def increment(self, key: str) -> int:
        """Atomically increment the counter *key* and return the new value.

        A counter that does not exist yet starts at zero, so the first
        call returns 1.
        """
