"""Memory and swap counter readers."""

from __future__ import annotations

import psutil

from ..snapshot import MemoryStats
from .base import BaseCollector, ReadError, clamp_counter


class MemoryCollector(BaseCollector):
    """Physical memory totals.

    ``used`` is ``total - available``: page cache and reclaimable buffers
    count as free, matching what the kernel considers allocatable without
    swapping.
    """

    @property
    def name(self) -> str:
        return "mem"

    def read(self) -> MemoryStats:
        try:
            mem = psutil.virtual_memory()
            total = clamp_counter(mem.total)
            available = clamp_counter(mem.available)
        except (OSError, RuntimeError, ValueError, AttributeError, psutil.Error) as exc:
            raise ReadError(self.name, str(exc)) from exc
        return MemoryStats(total=total, used=max(0, total - available))

    def fallback(self) -> MemoryStats:
        return MemoryStats()


class SwapCollector(BaseCollector):
    """Swap totals as the OS accounts them."""

    @property
    def name(self) -> str:
        return "swap"

    def read(self) -> MemoryStats:
        try:
            swap = psutil.swap_memory()
            return MemoryStats(total=clamp_counter(swap.total), used=clamp_counter(swap.used))
        except (OSError, RuntimeError, ValueError, AttributeError, psutil.Error) as exc:
            raise ReadError(self.name, str(exc)) from exc

    def fallback(self) -> MemoryStats:
        return MemoryStats()
