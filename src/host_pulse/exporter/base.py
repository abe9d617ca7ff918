"""Base interface for snapshot sinks."""

from __future__ import annotations

import abc

from ..snapshot import Snapshot


class BaseExporter(abc.ABC):
    """Abstract base for exporters that receive one snapshot per cycle."""

    @abc.abstractmethod
    def export(self, snapshot: Snapshot) -> None:
        """Handle one cycle's snapshot."""

    @abc.abstractmethod
    def shutdown(self) -> None:
        """Flush and release resources."""
