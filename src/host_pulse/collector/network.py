"""Network counter reader."""

from __future__ import annotations

import psutil

from ..snapshot import NetworkStats
from .base import BaseCollector, ReadError, clamp_counter


class NetworkCollector(BaseCollector):
    """Cumulative byte counters for every interface.

    Loopback, bridge and virtual interfaces are included. Counters are
    reported as-is; the set of interfaces may change from one read to the
    next.
    """

    @property
    def name(self) -> str:
        return "net"

    def read(self) -> dict[str, NetworkStats]:
        try:
            counters = psutil.net_io_counters(pernic=True)
        except (OSError, RuntimeError, psutil.Error) as exc:
            raise ReadError(self.name, str(exc)) from exc
        if counters is None:
            raise ReadError(self.name, "interface counters unavailable")

        stats: dict[str, NetworkStats] = {}
        for iface, nio in counters.items():
            try:
                stats[str(iface)] = NetworkStats(
                    rx=clamp_counter(nio.bytes_recv),
                    tx=clamp_counter(nio.bytes_sent),
                )
            except (ValueError, AttributeError) as exc:
                raise ReadError(self.name, f"malformed counters for {iface}: {exc}") from exc
        return stats

    def fallback(self) -> dict[str, NetworkStats]:
        return {}
