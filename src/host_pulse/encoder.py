"""JSON wire format for snapshots."""

from __future__ import annotations

import json

from .snapshot import Snapshot

CONTENT_TYPE = "application/json"


def encode(snapshot: Snapshot) -> bytes:
    """Serialize *snapshot* to compact UTF-8 JSON.

    Output is deterministic: top-level keys keep the order cpu, mem, swap,
    net, proc and interface names are sorted.
    """
    return json.dumps(
        snapshot.to_dict(),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def decode(payload: bytes | str) -> Snapshot:
    """Parse a payload produced by :func:`encode`."""
    return Snapshot.from_dict(json.loads(payload))
