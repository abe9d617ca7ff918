"""Process table reader – counts processes by scheduler state."""

from __future__ import annotations

import logging

import psutil

from ..snapshot import ProcessStats
from .base import BaseCollector, ReadError

logger = logging.getLogger(__name__)

_BUCKETS = {
    psutil.STATUS_RUNNING: "running",
    psutil.STATUS_SLEEPING: "sleeping",
    psutil.STATUS_ZOMBIE: "zombie",
}


class ProcessCollector(BaseCollector):
    """Counts processes as running, sleeping or zombie.

    Every listed process counts toward ``total``. States outside the three
    buckets (idle, disk-sleep, stopped, ...) are only counted there.
    """

    @property
    def name(self) -> str:
        return "proc"

    def read(self) -> ProcessStats:
        counts = {"running": 0, "sleeping": 0, "zombie": 0}
        total = 0
        try:
            # process_iter drops processes that exit mid-iteration and
            # leaves status as None when it cannot be read.
            for proc in psutil.process_iter(["status"]):
                total += 1
                bucket = _BUCKETS.get(proc.info.get("status"))
                if bucket is not None:
                    counts[bucket] += 1
        except (OSError, RuntimeError, psutil.Error) as exc:
            raise ReadError(self.name, str(exc)) from exc

        logger.debug("Counted %d processes: %s", total, counts)
        return ProcessStats(total=total, **counts)

    def fallback(self) -> ProcessStats:
        return ProcessStats()
