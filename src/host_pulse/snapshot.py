"""The per-cycle resource snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class MemoryStats:
    """Total and used bytes for memory or swap."""

    total: int = 0
    used: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "used": self.used}


@dataclass(frozen=True)
class NetworkStats:
    """Raw cumulative byte counters for one interface."""

    rx: int = 0
    tx: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"rx": self.rx, "tx": self.tx}


@dataclass(frozen=True)
class ProcessStats:
    """Process counts by state.

    The buckets do not have to add up to ``total``: states other than
    running, sleeping and zombie are only counted in ``total``.
    """

    total: int = 0
    running: int = 0
    sleeping: int = 0
    zombie: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "running": self.running,
            "sleeping": self.sleeping,
            "zombie": self.zombie,
        }


@dataclass(frozen=True)
class Snapshot:
    """Everything sampled in one cycle.

    A snapshot is built once by the sampler, handed to the sinks and then
    dropped. Nothing keeps a reference to it across cycles. ``cpu`` is
    stored as a tuple and ``net`` as a read-only mapping over a private
    copy, so sinks cannot change what the next sink receives.
    """

    cpu: tuple[float, ...] = ()
    mem: MemoryStats = field(default_factory=MemoryStats)
    swap: MemoryStats = field(default_factory=MemoryStats)
    net: Mapping[str, NetworkStats] = field(default_factory=dict)
    proc: ProcessStats = field(default_factory=ProcessStats)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cpu", tuple(self.cpu))
        object.__setattr__(self, "net", MappingProxyType(dict(self.net)))

    def __hash__(self) -> int:
        return hash((self.cpu, self.mem, self.swap, tuple(sorted(self.net.items())), self.proc))

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation as plain Python objects."""
        return {
            "cpu": [float(pct) for pct in self.cpu],
            "mem": self.mem.to_dict(),
            "swap": self.swap.to_dict(),
            "net": {name: self.net[name].to_dict() for name in sorted(self.net)},
            "proc": self.proc.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """Build a snapshot from its wire representation."""
        return cls(
            cpu=tuple(float(pct) for pct in data["cpu"]),
            mem=MemoryStats(**data["mem"]),
            swap=MemoryStats(**data["swap"]),
            net={name: NetworkStats(**counters) for name, counters in data["net"].items()},
            proc=ProcessStats(**data["proc"]),
        )
