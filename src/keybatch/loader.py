"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Loader façade: point lookups in, one batch call per window out.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Generic

from .invoker import BatchInvoker
from .metrics import LoaderMetrics
from .queue import RequestQueue
from .scheduler import FlushScheduler
from .types import BatchFn, K, LoaderConfig, LoaderState, PendingRequest, V

logger = logging.getLogger("keybatch.loader")


class Loader(Generic[K, V]):
    """
    Coalesce single-key lookups into batch calls.

    Every ``load`` made during one batch window is delivered to ``batch_fn``
    as a single ordered key list; the i-th returned value resolves the i-th
    caller. Keys are neither cached nor deduplicated.

    Example::

        async def batch_authors(ids: list[int]) -> list[Author | None]:
            rows = await db.fetch_authors(ids)
            by_id = {row.id: row for row in rows}
            return [by_id.get(author_id) for author_id in ids]

        authors = Loader(batch_authors, name="authors")
        first, second = await asyncio.gather(authors.load(1), authors.load(2))
    """

    def __init__(
        self,
        batch_fn: BatchFn,
        *,
        name: str | None = None,
        config: LoaderConfig | None = None,
        metrics: LoaderMetrics | None = None,
    ) -> None:
        if not callable(batch_fn):
            raise TypeError("batch_fn must be callable")
        self._name = name or getattr(batch_fn, "__name__", None) or "loader"
        self._config = config or LoaderConfig()
        self._queue: RequestQueue[K, V] = RequestQueue()
        self._invoker: BatchInvoker[K, V] = BatchInvoker(
            batch_fn,
            name=self._name,
            config=self._config,
            metrics=metrics,
        )
        self._scheduler = FlushScheduler(self._flush, ticks=self._config.defer_ticks)
        self._in_flight: set[asyncio.Task[object]] = set()

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> LoaderConfig:
        return self._config

    @property
    def pending_count(self) -> int:
        """Number of loads queued for the current window."""
        return len(self._queue)

    @property
    def in_flight_count(self) -> int:
        """Number of dispatched batches whose batch function has not settled."""
        return len(self._in_flight)

    @property
    def state(self) -> LoaderState:
        if self._scheduler.armed:
            return "armed"
        if self._in_flight:
            return "flushing"
        return "idle"

    def load(self, key: K) -> asyncio.Future[V]:
        """
        Queue `key` for the current batch window.

        Returns immediately with a future that resolves to the value the batch
        function returned at this key's position, or raises the batch
        function's error.

        Raises:
            RuntimeError: When called without a running event loop.
        """
        loop = asyncio.get_running_loop()
        sink: asyncio.Future[V] = loop.create_future()
        self._queue.append(PendingRequest(key=key, sink=sink))
        self._scheduler.arm(loop)
        return sink

    def load_many(self, keys: Iterable[K]) -> asyncio.Future[list[V]]:
        """
        Queue every key in `keys`, in order, for the current batch window.

        The returned future resolves to the values in key order, or raises
        the first failure among them.
        """
        sinks = [self.load(key) for key in keys]
        if not sinks:
            future: asyncio.Future[list[V]] = asyncio.get_running_loop().create_future()
            future.set_result([])
            return future
        return asyncio.gather(*sinks)  # type: ignore[return-value]

    def _flush(self) -> None:
        snapshot = self._queue.drain()
        if not snapshot:
            return
        task = asyncio.get_running_loop().create_task(self._invoker.run(snapshot))
        self._in_flight.add(task)
        task.add_done_callback(self._on_batch_done)

    def _on_batch_done(self, task: asyncio.Task[object]) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            logger.warning("Batch task for loader '%s' was cancelled", self._name)
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Batch task for loader '%s' crashed",
                self._name,
                exc_info=exc,
            )

    def __repr__(self) -> str:
        return (
            f"Loader(name={self._name!r}, state={self.state!r}, "
            f"pending={self.pending_count}, in_flight={self.in_flight_count})"
        )
