"""Shared fixtures: a throwaway HTTP collector and fake counter readers."""

from __future__ import annotations

import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

import pytest

from host_pulse.collector.base import BaseCollector, ReadError
from host_pulse.snapshot import MemoryStats, NetworkStats, ProcessStats


class _CollectorHandler(BaseHTTPRequestHandler):
    def do_POST(self) -> None:  # noqa: N802
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        self.server.received.append({
            "path": self.path,
            "headers": dict(self.headers),
            "body": body,
        })
        status = self.server.statuses.pop(0) if self.server.statuses else 200
        self.send_response(status)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, *_args: Any) -> None:
        pass


@pytest.fixture
def collector_server():
    """Local HTTP collector recording every POST.

    Append to ``server.statuses`` to script the status codes of the next
    responses; once empty every request gets 200.
    """
    server = ThreadingHTTPServer(("127.0.0.1", 0), _CollectorHandler)
    server.received = []
    server.statuses = []
    host, port = server.server_address[:2]
    server.url = f"http://{host}:{port}/ingest"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


@pytest.fixture
def unreachable_url() -> str:
    """URL of a local port nobody listens on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/ingest"


class StaticCollector(BaseCollector):
    """Reader returning a fixed value, counting how often it is read."""

    def __init__(self, tag: str, value: Any, zero: Any) -> None:
        self._tag = tag
        self._value = value
        self._zero = zero
        self.reads = 0

    @property
    def name(self) -> str:
        return self._tag

    def read(self) -> Any:
        self.reads += 1
        return self._value

    def fallback(self) -> Any:
        return self._zero


class FailingCollector(StaticCollector):
    """Reader that raises on its first *failures* reads, then succeeds."""

    def __init__(self, tag: str, value: Any, zero: Any, failures: int = 10**9,
                 error: Exception | None = None) -> None:
        super().__init__(tag, value, zero)
        self._failures = failures
        self._error = error

    def read(self) -> Any:
        self.reads += 1
        if self.reads <= self._failures:
            raise self._error or ReadError(self._tag, "injected failure")
        return self._value


SCENARIO = {
    "cpu": [12.5, 3.0, 0.0, 100.0],
    "mem": MemoryStats(total=16360284160, used=10183102464),
    "swap": MemoryStats(total=17179865088, used=4194304),
    "net": {"lo": NetworkStats(rx=4094, tx=4094)},
    "proc": ProcessStats(total=280, running=0, sleeping=215, zombie=0),
}

ZERO = {
    "cpu": [0.0, 0.0, 0.0, 0.0],
    "mem": MemoryStats(),
    "swap": MemoryStats(),
    "net": {},
    "proc": ProcessStats(),
}


def static_readers(**overrides: BaseCollector) -> dict[str, BaseCollector]:
    """Readers reporting the four-core scenario host, with overrides."""
    readers: dict[str, BaseCollector] = {
        tag: StaticCollector(tag, SCENARIO[tag], ZERO[tag]) for tag in SCENARIO
    }
    readers.update(overrides)
    return readers


@pytest.fixture(autouse=True)
def _no_proxy(monkeypatch):
    """Keep requests to the local collector off any configured proxy."""
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)
