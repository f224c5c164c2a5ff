"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Loader counters and the sinks that record them.

Every counter is labelled by loader name. The Prometheus sink registers the
whole set once per (registry, namespace) pair and shares it between
instances, so building one loader per request never re-registers a series.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from threading import Lock
from typing import Protocol

BATCHES_TOTAL = "loader_batches_total"
KEYS_TOTAL = "loader_keys_total"
BATCH_FAILURES_TOTAL = "loader_batch_failures_total"
MISSING_VALUES_TOTAL = "loader_missing_values_total"
EXTRA_VALUES_TOTAL = "loader_extra_values_total"

LOADER_COUNTERS: dict[str, str] = {
    BATCHES_TOTAL: "Batch function calls dispatched",
    KEYS_TOTAL: "Keys delivered to batch functions, repeats included",
    BATCH_FAILURES_TOTAL: "Windows whose batch call failed",
    MISSING_VALUES_TOTAL: "Positions padded with None after a short response",
    EXTRA_VALUES_TOTAL: "Values dropped from responses longer than their key list",
}


class LoaderMetrics(Protocol):
    """Counter sink used by the batch invoker."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        """Add `value` to counter `name`."""


class NoOpLoaderMetrics:
    """Discards every count."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        return None


_registered: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()
_registered_lock = Lock()


def _loader_counters(registry, namespace: str) -> dict[str, object]:
    from prometheus_client import Counter

    with _registered_lock:
        by_namespace = _registered.setdefault(registry, {})
        counters = by_namespace.get(namespace)
        if counters is None:
            counters = {
                name: Counter(
                    name,
                    documentation,
                    labelnames=("loader",),
                    namespace=namespace,
                    registry=registry,
                )
                for name, documentation in LOADER_COUNTERS.items()
            }
            by_namespace[namespace] = counters
        return counters


class PrometheusLoaderMetrics:
    """
    Records loader counters in a Prometheus registry.

    Exported names are ``<namespace>_<counter>``, for example
    ``keybatch_loader_batches_total{loader="authors"}``. Instances built for
    the same registry and namespace share one set of collectors.
    """

    def __init__(self, *, namespace: str = "keybatch", registry=None) -> None:
        try:
            from prometheus_client import REGISTRY
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "PrometheusLoaderMetrics requires `prometheus_client` to be installed."
            ) from exc

        self._registry = registry if registry is not None else REGISTRY
        self._namespace = namespace
        self._counters = _loader_counters(self._registry, namespace)

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        counter = self._counters.get(name)
        if counter is None:
            raise ValueError(f"Unknown loader counter: {name}")
        loader = (tags or {}).get("loader", "")
        counter.labels(loader).inc(value)
