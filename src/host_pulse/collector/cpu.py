"""CPU counter reader."""

from __future__ import annotations

import psutil

from .base import BaseCollector, ReadError


def logical_core_count() -> int:
    """Number of logical cores, never less than one."""
    return psutil.cpu_count(logical=True) or 1


class CpuCollector(BaseCollector):
    """Per-core utilisation over a fixed window.

    :meth:`read` blocks for *window_seconds* between the two counter reads
    psutil needs to derive a percentage. With a window of zero psutil
    compares against the previous call instead, so the first reading after
    startup is meaningless.
    """

    def __init__(self, window_seconds: float = 0.5) -> None:
        self._window = window_seconds
        self._cores = logical_core_count()

    @property
    def name(self) -> str:
        return "cpu"

    def read(self) -> list[float]:
        try:
            per_cpu = psutil.cpu_percent(interval=self._window, percpu=True)
        except (OSError, RuntimeError, psutil.Error) as exc:
            raise ReadError(self.name, str(exc)) from exc
        if not per_cpu:
            raise ReadError(self.name, "no per-core counters reported")
        try:
            return [min(100.0, max(0.0, float(pct))) for pct in per_cpu]
        except (TypeError, ValueError) as exc:
            raise ReadError(self.name, f"malformed percentage: {exc}") from exc

    def fallback(self) -> list[float]:
        return [0.0] * self._cores
