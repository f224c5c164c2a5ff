"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Loader settings and explicit config loading from `KEYBATCH_*` variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .metrics import LoaderMetrics, NoOpLoaderMetrics, PrometheusLoaderMetrics
from .types import LoaderConfig

_TRUE = ("1", "true", "yes", "y", "on")
_FALSE = ("0", "false", "no", "n", "off")


def _env(name: str) -> str | None:
    """Return the stripped value of `name`, or None when unset or blank."""
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    value = raw.lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True, slots=True)
class LoaderSettings:
    """Explicit settings shared by every loader built from one process config."""

    defer_ticks: int = 2
    strict_length: bool = False
    metrics_backend: str = "noop"
    metrics_namespace: str = "keybatch"

    @staticmethod
    def from_env() -> "LoaderSettings":
        """Load settings from environment variables."""
        return LoaderSettings(
            defer_ticks=_env_int("KEYBATCH_DEFER_TICKS", 2),
            strict_length=_env_bool("KEYBATCH_STRICT_LENGTH", False),
            metrics_backend=(_env("KEYBATCH_METRICS_BACKEND") or "noop").lower(),
            metrics_namespace=_env("KEYBATCH_METRICS_NAMESPACE") or "keybatch",
        )

    def to_config(self) -> LoaderConfig:
        """Adapt settings into the per-loader LoaderConfig object."""
        return LoaderConfig(
            defer_ticks=self.defer_ticks,
            strict_length=self.strict_length,
        )

    def create_metrics(self, *, registry=None) -> LoaderMetrics:
        """
        Build the metrics sink named by `metrics_backend`.

        Backends:
        - `noop` (default)
        - `prometheus`
        """
        if self.metrics_backend in ("noop", "none", "off", ""):
            return NoOpLoaderMetrics()
        if self.metrics_backend in ("prometheus", "prom"):
            return PrometheusLoaderMetrics(
                namespace=self.metrics_namespace, registry=registry
            )
        raise ValueError(f"Unknown KEYBATCH_METRICS_BACKEND: {self.metrics_backend}")
