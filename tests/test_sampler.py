"""Tests for the sampler and its handling of failing readers."""

import psutil
import pytest

from conftest import SCENARIO, ZERO, FailingCollector, StaticCollector, static_readers
from host_pulse.collector.base import ReadError
from host_pulse.collector.cpu import CpuCollector
from host_pulse.collector.sampler import Sampler, build_collectors
from host_pulse.config import SamplerConfig
from host_pulse.snapshot import MemoryStats, ProcessStats, Snapshot


def test_sample_real_host():
    sampler = Sampler(SamplerConfig(cpu_window_seconds=0.05))
    snapshot = sampler.sample()
    assert isinstance(snapshot, Snapshot)
    assert len(snapshot.cpu) == psutil.cpu_count(logical=True)
    assert snapshot.mem.total > 0
    assert snapshot.proc.total > 0
    assert isinstance(snapshot.net, dict)


def test_build_collectors_uses_cpu_window():
    collectors = build_collectors(SamplerConfig(cpu_window_seconds=0.2))
    assert set(collectors) == {"cpu", "mem", "swap", "net", "proc"}
    assert collectors["cpu"]._window == 0.2


def test_sample_from_static_readers():
    snapshot = Sampler(collectors=static_readers()).sample()
    assert snapshot == Snapshot(
        cpu=tuple(SCENARIO["cpu"]),
        mem=SCENARIO["mem"],
        swap=SCENARIO["swap"],
        net=SCENARIO["net"],
        proc=SCENARIO["proc"],
    )


def test_single_failing_reader_gets_zero_value(caplog):
    broken = FailingCollector("net", SCENARIO["net"], {})
    sampler = Sampler(collectors=static_readers(net=broken))

    with caplog.at_level("WARNING"):
        snapshot, failures = sampler.sample_with_diagnostics()

    assert snapshot.net == {}
    assert snapshot.mem == SCENARIO["mem"]
    assert snapshot.proc == SCENARIO["proc"]
    assert list(failures) == ["net"]
    assert isinstance(failures["net"], ReadError)
    assert "Reader net failed" in caplog.text


def test_failure_does_not_reuse_previous_value():
    flaky = FailingCollector("mem", MemoryStats(total=10, used=5), MemoryStats(), failures=0)
    sampler = Sampler(collectors=static_readers(mem=flaky))
    assert sampler.sample().mem == MemoryStats(total=10, used=5)

    flaky._failures = 2
    assert sampler.sample().mem == MemoryStats()


def test_permanently_broken_reader_every_cycle():
    broken = FailingCollector("proc", SCENARIO["proc"], ProcessStats())
    sampler = Sampler(collectors=static_readers(proc=broken))
    for _ in range(5):
        snapshot, failures = sampler.sample_with_diagnostics()
        assert snapshot.proc == ProcessStats()
        assert "proc" in failures
    assert broken.reads == 5


def test_reader_recovers_next_cycle():
    flaky = FailingCollector("swap", SCENARIO["swap"], MemoryStats(), failures=1)
    sampler = Sampler(collectors=static_readers(swap=flaky))
    assert sampler.sample().swap == MemoryStats()
    snapshot, failures = sampler.sample_with_diagnostics()
    assert snapshot.swap == SCENARIO["swap"]
    assert failures == {}


def test_unexpected_exception_is_downgraded(caplog):
    broken = FailingCollector("cpu", SCENARIO["cpu"], ZERO["cpu"], error=RuntimeError("kaput"))
    sampler = Sampler(collectors=static_readers(cpu=broken))
    with caplog.at_level("WARNING"):
        snapshot, failures = sampler.sample_with_diagnostics()
    assert snapshot.cpu == (0.0, 0.0, 0.0, 0.0)
    assert failures["cpu"].collector == "cpu"
    assert "kaput" in failures["cpu"].message


def test_all_readers_failing_still_returns_snapshot():
    readers = {tag: FailingCollector(tag, SCENARIO[tag], ZERO[tag]) for tag in SCENARIO}
    snapshot, failures = Sampler(collectors=readers).sample_with_diagnostics()
    assert snapshot == Snapshot(cpu=(0.0, 0.0, 0.0, 0.0))
    assert set(failures) == set(SCENARIO)


def test_cpu_failure_keeps_core_count(monkeypatch):
    cpu = CpuCollector(window_seconds=0)

    def boom(*_args, **_kwargs):
        raise OSError("unavailable")

    monkeypatch.setattr(psutil, "cpu_percent", boom)
    snapshot = Sampler(collectors=static_readers(cpu=cpu)).sample()
    assert len(snapshot.cpu) == psutil.cpu_count(logical=True)
    assert set(snapshot.cpu) == {0.0}


def test_disabled_readers_are_not_called():
    readers = static_readers()
    config = SamplerConfig(network=False, processes=False)
    snapshot = Sampler(config, collectors=readers).sample()
    assert readers["net"].reads == 0
    assert readers["proc"].reads == 0
    assert readers["cpu"].reads == 1
    assert snapshot.net == {}
    assert snapshot.proc == ProcessStats()


def test_missing_or_unknown_tags_rejected():
    readers = static_readers()
    del readers["swap"]
    with pytest.raises(ValueError, match="missing"):
        Sampler(collectors=readers)

    readers = static_readers(disk=StaticCollector("disk", 0, 0))
    with pytest.raises(ValueError, match="unknown"):
        Sampler(collectors=readers)
