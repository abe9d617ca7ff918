"""Sampler – runs every counter reader once and assembles a snapshot."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..config import SamplerConfig
from ..snapshot import Snapshot
from .base import BaseCollector, ReadError
from .cpu import CpuCollector
from .memory import MemoryCollector, SwapCollector
from .network import NetworkCollector
from .process import ProcessCollector

logger = logging.getLogger(__name__)

# Reader tag -> implementation. Tags double as snapshot field names.
READERS: dict[str, type[BaseCollector]] = {
    "cpu": CpuCollector,
    "mem": MemoryCollector,
    "swap": SwapCollector,
    "net": NetworkCollector,
    "proc": ProcessCollector,
}


def build_collectors(config: SamplerConfig) -> dict[str, BaseCollector]:
    """Instantiate one reader per family from *config*."""
    options: dict[str, dict[str, Any]] = {
        "cpu": {"window_seconds": config.cpu_window_seconds},
    }
    return {tag: cls(**options.get(tag, {})) for tag, cls in READERS.items()}


def _enabled_tags(config: SamplerConfig) -> set[str]:
    toggles = {
        "cpu": config.cpu,
        "mem": config.memory,
        "swap": config.swap,
        "net": config.network,
        "proc": config.processes,
    }
    return {tag for tag, on in toggles.items() if on}


class Sampler:
    """Produces one :class:`Snapshot` per call.

    A reader that raises is replaced by its zero value for that cycle; the
    previous cycle's value is never reused. Disabled readers are not
    called and contribute their zero value too. The sampler itself never
    raises for a reader failure.
    """

    def __init__(
        self,
        config: SamplerConfig | None = None,
        collectors: Mapping[str, BaseCollector] | None = None,
    ) -> None:
        self._config = config or SamplerConfig()
        if collectors is None:
            collectors = build_collectors(self._config)
        unknown = set(collectors) - set(READERS)
        if unknown:
            raise ValueError(f"unknown reader tags: {sorted(unknown)}")
        missing = set(READERS) - set(collectors)
        if missing:
            raise ValueError(f"missing readers for: {sorted(missing)}")
        self._collectors = dict(collectors)
        self._enabled = _enabled_tags(self._config)

    def sample(self) -> Snapshot:
        """Read every family once and return the assembled snapshot."""
        snapshot, _ = self.sample_with_diagnostics()
        return snapshot

    def sample_with_diagnostics(self) -> tuple[Snapshot, dict[str, ReadError]]:
        """Like :meth:`sample`, also returning the failures of this cycle."""
        values: dict[str, Any] = {}
        failures: dict[str, ReadError] = {}
        for tag, collector in self._collectors.items():
            if tag not in self._enabled:
                values[tag] = collector.fallback()
                continue
            try:
                values[tag] = collector.read()
            except ReadError as exc:
                failures[tag] = exc
                values[tag] = collector.fallback()
                logger.warning("Reader %s failed, reporting zero value: %s", tag, exc.message)
            except Exception as exc:
                failures[tag] = ReadError(tag, repr(exc))
                values[tag] = collector.fallback()
                logger.exception("Reader %s raised unexpectedly, reporting zero value", tag)

        snapshot = Snapshot(
            cpu=tuple(values["cpu"]),
            mem=values["mem"],
            swap=values["swap"],
            net=dict(values["net"]),
            proc=values["proc"],
        )
        return snapshot, failures
