"""CLI interface for host_pulse."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import time

from . import __version__
from .config import ConfigError, HostPulseConfig, load_config

logger = logging.getLogger(__name__)


def _load(args: argparse.Namespace) -> HostPulseConfig:
    cfg = load_config(args.config)
    if getattr(args, "interval", None) is not None:
        cfg.interval_seconds = args.interval
    if getattr(args, "endpoint", None):
        cfg.reporter.endpoint = args.endpoint
    if getattr(args, "no_display", False):
        cfg.display.enabled = False
    return cfg.validate()


def _shutdown_grace(cfg: HostPulseConfig) -> float:
    """Longest a cycle in flight can still take: CPU window plus one POST.

    The requests timeout bounds connect and read separately, so a POST can
    take up to twice that.
    """
    return cfg.sampler.cpu_window_seconds + 2 * cfg.reporter.timeout_seconds + 1.0


def _cmd_run(args: argparse.Namespace) -> None:
    """Sample and report until interrupted."""
    cfg = _load(args)

    from .collector.sampler import Sampler
    from .exporter.console import ConsoleExporter
    from .exporter.http import HttpReporter
    from .scheduler import CycleScheduler

    reporter = HttpReporter(cfg.reporter)
    exporters = [reporter]
    if cfg.display.enabled:
        exporters.append(ConsoleExporter(endpoint=reporter.endpoint))

    scheduler = CycleScheduler(
        Sampler(cfg.sampler),
        cfg.interval_seconds,
        startup_delay_seconds=cfg.startup_delay_seconds,
    )
    for exp in exporters:
        scheduler.add_sink(exp.export)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    logger.info(
        "Reporting to %s every %.1fs (cpu window %.2fs)",
        cfg.reporter.endpoint,
        cfg.interval_seconds,
        cfg.sampler.cpu_window_seconds,
    )
    scheduler.start()
    try:
        while not stop:
            time.sleep(0.5)
    finally:
        if scheduler.stop(timeout=_shutdown_grace(cfg)):
            for exp in exporters:
                exp.shutdown()
        else:
            logger.warning("Exiting with a cycle still in flight; leaving exporters open")
    logger.info("Stopped.")


def _cmd_sample(args: argparse.Namespace) -> None:
    """Run one sampling cycle and print the payload."""
    cfg = _load(args)

    from .collector.sampler import Sampler
    from .encoder import encode

    snapshot, failures = Sampler(cfg.sampler).sample_with_diagnostics()
    if args.pretty:
        print(json.dumps(snapshot.to_dict(), indent=2))
    else:
        print(encode(snapshot).decode("utf-8"))
    for tag, exc in failures.items():
        print(f"reader {tag} failed: {exc.message}", file=sys.stderr)


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"host_pulse {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the host-pulse CLI."""
    parser = argparse.ArgumentParser(
        prog="host-pulse",
        description="Sample host resource counters and POST them as JSON",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to host_pulse.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # run
    run_p = sub.add_parser("run", help="Sample and report on an interval")
    run_p.add_argument("--interval", "-i", type=float, default=None, metavar="SECONDS", help="Reporting interval")
    run_p.add_argument("--endpoint", "-e", default=None, metavar="URL", help="Collector URL")
    run_p.add_argument("--no-display", action="store_true", help="Only send data, do not draw the table")
    run_p.set_defaults(func=_cmd_run)

    # sample
    sample_p = sub.add_parser("sample", help="Sample once and print the JSON payload")
    sample_p.add_argument("--pretty", action="store_true", help="Indent the output")
    sample_p.set_defaults(func=_cmd_sample)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except ConfigError as exc:
        print(f"host-pulse: configuration error: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
