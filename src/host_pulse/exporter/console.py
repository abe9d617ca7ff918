"""Console exporter – renders each snapshot as a table in the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..snapshot import MemoryStats, Snapshot
from .base import BaseExporter

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(value: int) -> str:
    """Render a byte count with binary units and two decimals."""
    size = float(value)
    unit = 0
    while size >= 1024.0 and unit < len(_UNITS) - 1:
        size /= 1024.0
        unit += 1
    return f"{size:.2f} {_UNITS[unit]}"


def _usage(stats: MemoryStats) -> str:
    pct = (stats.used / stats.total * 100.0) if stats.total else 0.0
    return f"{format_bytes(stats.used)} / {format_bytes(stats.total)} ({pct:.1f}%)"


class ConsoleExporter(BaseExporter):
    """Clears the screen and prints the latest snapshot.

    *endpoint* is only shown in the footer so the operator can see where
    data is going.
    """

    def __init__(self, endpoint: str = "", console: Console | None = None) -> None:
        self._endpoint = endpoint
        self._console = console or Console()

    def render(self, snapshot: Snapshot) -> Table:
        table = Table(title="Host Resources", show_header=True)
        table.add_column("Resource", style="cyan", width=16)
        table.add_column("Value", justify="right")

        for idx, pct in enumerate(snapshot.cpu):
            table.add_row(f"CPU {idx}", f"{pct:.1f}%")
        avg = sum(snapshot.cpu) / len(snapshot.cpu) if snapshot.cpu else 0.0
        table.add_row("CPU avg", f"[bold]{avg:.1f}%[/bold]", end_section=True)

        table.add_row("Memory", _usage(snapshot.mem))
        table.add_row("Swap", _usage(snapshot.swap), end_section=True)

        for name in sorted(snapshot.net):
            counters = snapshot.net[name]
            table.add_row(
                f"net {escape(name)}",
                f"rx {format_bytes(counters.rx)}  tx {format_bytes(counters.tx)}",
            )
        if not snapshot.net:
            table.add_row("net", "[dim]no interfaces[/dim]")
        table.add_section()

        proc = snapshot.proc
        table.add_row(
            "Processes",
            f"total {proc.total}, running {proc.running}, "
            f"sleeping {proc.sleeping}, zombie {proc.zombie}",
        )
        return table

    def export(self, snapshot: Snapshot) -> None:
        table = self.render(snapshot)
        if self._console.is_terminal:
            self._console.clear()
        self._console.print(table)
        if self._endpoint:
            self._console.print(f"Reporting to {escape(self._endpoint)}")
        self._console.print("Press Ctrl+C to exit", style="dim")

    def shutdown(self) -> None:
        pass
