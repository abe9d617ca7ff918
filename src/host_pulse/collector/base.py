"""Base interface for counter readers."""

from __future__ import annotations

import abc
from typing import Any

# Counters go out as signed 64-bit integers on the wire.
MAX_COUNTER = 2**63 - 1


class ReadError(Exception):
    """Raised when a reader cannot obtain its counters."""

    def __init__(self, collector: str, message: str) -> None:
        super().__init__(f"{collector}: {message}")
        self.collector = collector
        self.message = message


def clamp_counter(value: Any) -> int:
    """Coerce an OS counter into a non-negative int that fits in 63 bits."""
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"not a counter: {value!r}") from exc
    return max(0, min(number, MAX_COUNTER))


class BaseCollector(abc.ABC):
    """Abstract base class for counter readers.

    Each reader covers one metric family and returns the value that goes
    into the matching :class:`~host_pulse.snapshot.Snapshot` field.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Reader tag, also the snapshot field it fills."""

    @abc.abstractmethod
    def read(self) -> Any:
        """Read current counters. Raises :class:`ReadError` on failure."""

    @abc.abstractmethod
    def fallback(self) -> Any:
        """Zero value used when the reader fails or is disabled."""
