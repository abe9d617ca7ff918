"""Cycle scheduler – drives sampler and sinks on a fixed interval."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from .collector.sampler import Sampler
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


class CycleScheduler:
    """Runs one sample-and-report cycle per interval.

    Ticks are scheduled against fixed deadlines on a timer thread, so a slow
    cycle does not push later ticks back. Each cycle runs on its own worker
    thread. If the previous cycle is still in flight when a tick fires, that
    tick is dropped: at most one cycle runs at a time.

    Usage::

        scheduler = CycleScheduler(sampler, interval_seconds=1.0)
        scheduler.add_sink(reporter.export)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        sampler: Sampler,
        interval_seconds: float,
        *,
        startup_delay_seconds: float = 0.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._sampler = sampler
        self._interval = interval_seconds
        self._startup_delay = startup_delay_seconds
        self._sinks: list[Callable[[Snapshot], None]] = []
        self._thread: threading.Thread | None = None
        self._worker: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._busy = threading.Lock()
        self.cycles = 0
        self.dropped = 0

    def add_sink(self, sink: Callable[[Snapshot], None]) -> None:
        """Register a callback to receive each cycle's snapshot."""
        self._sinks.append(sink)

    @property
    def running(self) -> bool:
        return self._thread is not None

    def run_cycle(self) -> Snapshot:
        """Sample once and hand the snapshot to every sink, synchronously."""
        snapshot = self._sampler.sample()
        for sink in self._sinks:
            try:
                sink(snapshot)
            except Exception:
                logger.exception("Sink failed")
        self.cycles += 1
        return snapshot

    def tick(self) -> bool:
        """Start a cycle on a worker thread unless one is already running.

        Returns False when the tick was dropped.
        """
        if not self._busy.acquire(blocking=False):
            self.dropped += 1
            logger.warning("Previous cycle still running, dropping this one (%d dropped)", self.dropped)
            return False
        self._worker = threading.Thread(target=self._guarded_cycle, name="host-pulse-cycle", daemon=True)
        self._worker.start()
        return True

    def _guarded_cycle(self) -> None:
        try:
            self.run_cycle()
        except Exception:
            logger.exception("Cycle failed")
        finally:
            self._busy.release()

    def _run(self) -> None:
        """Timer thread loop."""
        if self._startup_delay and self._stop_event.wait(self._startup_delay):
            return
        deadline = time.monotonic()
        while not self._stop_event.is_set():
            self.tick()
            deadline += self._interval
            now = time.monotonic()
            if deadline < now:
                # Fell behind by more than an interval; realign instead of bursting.
                deadline = now
            self._stop_event.wait(deadline - now)

    def start(self) -> None:
        """Start the timer in the background."""
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="host-pulse-timer", daemon=True)
        self._thread.start()
        logger.info("CycleScheduler started (interval=%.1fs)", self._interval)

    def stop(self, timeout: float = 5.0) -> bool:
        """Stop the timer and wait up to *timeout* for an in-flight cycle.

        Returns False if a cycle is still running afterwards; its sinks must
        not be shut down yet.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        if self._worker is not None:
            self._worker.join(timeout=timeout)
            if self._worker.is_alive():
                logger.warning("Cycle still running %.1fs after stop", timeout)
                return False
            self._worker = None
        logger.info("CycleScheduler stopped (cycles=%d, dropped=%d)", self.cycles, self.dropped)
        return True
