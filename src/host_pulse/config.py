"""Configuration loading and validation for host_pulse."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml


class ConfigError(ValueError):
    """Raised when the configuration cannot be used to run the agent."""


@dataclass
class SamplerConfig:
    """Which counter readers run, and how long the CPU window is."""

    cpu: bool = True
    memory: bool = True
    swap: bool = True
    network: bool = True
    processes: bool = True
    cpu_window_seconds: float = 0.5


@dataclass
class ReporterConfig:
    """HTTP collector settings."""

    endpoint: str = "http://localhost:25800"
    timeout_seconds: float = 5.0
    headers: dict[str, str] = field(default_factory=dict)
    verify_tls: bool = True


@dataclass
class DisplayConfig:
    """Terminal display settings."""

    enabled: bool = True


@dataclass
class HostPulseConfig:
    """Top-level host_pulse configuration."""

    interval_seconds: float = 1.0
    startup_delay_seconds: float = 0.0
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    reporter: ReporterConfig = field(default_factory=ReporterConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def validate(self) -> HostPulseConfig:
        """Check cross-field constraints. Returns self for chaining."""
        durations = {
            "interval_seconds": self.interval_seconds,
            "startup_delay_seconds": self.startup_delay_seconds,
            "cpu_window_seconds": self.sampler.cpu_window_seconds,
            "timeout_seconds": self.reporter.timeout_seconds,
        }
        for name, value in durations.items():
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number, got {value!r}")
        if self.interval_seconds <= 0:
            raise ConfigError(f"interval_seconds must be positive, got {self.interval_seconds}")
        if self.startup_delay_seconds < 0:
            raise ConfigError("startup_delay_seconds must not be negative")
        window = self.sampler.cpu_window_seconds
        if window < 0:
            raise ConfigError(f"cpu_window_seconds must not be negative, got {window}")
        if window >= self.interval_seconds:
            raise ConfigError(
                f"cpu_window_seconds ({window}) must be shorter than "
                f"interval_seconds ({self.interval_seconds})"
            )
        if self.reporter.timeout_seconds <= 0:
            raise ConfigError("reporter timeout_seconds must be positive")
        endpoint = self.reporter.endpoint
        parsed = urlparse(endpoint) if isinstance(endpoint, str) else None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"reporter endpoint is not an http(s) URL: {self.reporter.endpoint!r}")
        return self


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off", ""):
            return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _parse_float(value: Any) -> float:
    # bool is an int subclass; "true" for a duration is a typo, not 1.0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _parse_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _parse_headers(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"expected a mapping, got {value!r}")
    return {str(k): str(v) for k, v in value.items()}


# Field annotation (a string under postponed evaluation) -> converter.
_COERCERS = {
    "float": _parse_float,
    "bool": _parse_bool,
    "str": _parse_str,
    "dict[str, str]": _parse_headers,
}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using HOST_PULSE_ prefix."""
    env_map = {
        "HOST_PULSE_INTERVAL": (("interval_seconds",), _parse_float),
        "HOST_PULSE_CPU_WINDOW": (("sampler", "cpu_window_seconds"), _parse_float),
        "HOST_PULSE_ENDPOINT": (("reporter", "endpoint"), _parse_str),
        "HOST_PULSE_TIMEOUT": (("reporter", "timeout_seconds"), _parse_float),
        "HOST_PULSE_DISPLAY": (("display", "enabled"), _parse_bool),
    }
    for env_key, (path, coerce) in env_map.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        obj = data
        for part in path[:-1]:
            if not isinstance(obj.get(part), dict):
                obj[part] = {}
            obj = obj[part]
        try:
            obj[path[-1]] = coerce(value)
        except ValueError as exc:
            raise ConfigError(f"{env_key}={value!r}: {exc}") from exc
    return data


def _section(cls: type, data: Any, where: str) -> Any:
    """Build dataclass *cls* from *data*, converting each known field to its declared type."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected a mapping, got {data!r}")
    fields = cls.__dataclass_fields__
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in fields:
            continue
        coerce = _COERCERS[fields[key].type]
        try:
            kwargs[key] = coerce(value)
        except ValueError as exc:
            name = f"{where}.{key}" if where else key
            raise ConfigError(f"{name}: {exc}") from exc
    return cls(**kwargs)


def _dict_to_config(data: dict[str, Any]) -> HostPulseConfig:
    """Convert a raw dictionary to a HostPulseConfig dataclass."""
    top_level = {k: data[k] for k in ("interval_seconds", "startup_delay_seconds") if k in data}
    cfg = _section(HostPulseConfig, top_level, "")
    cfg.sampler = _section(SamplerConfig, data.get("sampler"), "sampler")
    cfg.reporter = _section(ReporterConfig, data.get("reporter"), "reporter")
    cfg.display = _section(DisplayConfig, data.get("display"), "display")
    return cfg


def load_config(path: str | Path | None = None) -> HostPulseConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``host_pulse.yaml`` in the current directory if *path* is None.
    The result is not validated; command-line overrides are applied first
    and :meth:`HostPulseConfig.validate` is called afterwards.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("host_pulse.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            try:
                loaded = yaml.safe_load(fh)
            except yaml.YAMLError as exc:
                raise ConfigError(f"{path}: {exc}") from exc
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
