"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Batch invocation: one call to the batch function per drained window, with
results routed back to each pending request by position.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Sequence
from typing import Generic

from .errors import BatchLengthMismatchError, BatchResponseTypeError
from .metrics import (
    BATCH_FAILURES_TOTAL,
    BATCHES_TOTAL,
    EXTRA_VALUES_TOTAL,
    KEYS_TOTAL,
    MISSING_VALUES_TOTAL,
    LoaderMetrics,
    NoOpLoaderMetrics,
)
from .types import BatchFn, BatchOutcome, K, LoaderConfig, PendingRequest, V

logger = logging.getLogger("keybatch.invoker")


class BatchInvoker(Generic[K, V]):
    """Runs the batch function for one snapshot and settles its sinks."""

    def __init__(
        self,
        batch_fn: BatchFn,
        *,
        name: str,
        config: LoaderConfig | None = None,
        metrics: LoaderMetrics | None = None,
    ) -> None:
        self._batch_fn = batch_fn
        self._name = name
        self._config = config or LoaderConfig()
        self._metrics: LoaderMetrics = metrics or NoOpLoaderMetrics()
        self._tags = {"loader": name}

    async def run(self, snapshot: list[PendingRequest[K, V]]) -> BatchOutcome[V]:
        """
        Invoke the batch function once for `snapshot` and settle every sink.

        An empty snapshot is a no-op. Failures are delivered to every sink in
        this snapshot and returned rather than raised, so one window's error
        never leaks into another.
        """
        if not snapshot:
            return BatchOutcome.success(())

        keys = [request.key for request in snapshot]
        self._count(BATCHES_TOTAL)
        self._count(KEYS_TOTAL, len(keys))
        logger.debug("Loader '%s' dispatching batch of %d key(s)", self._name, len(keys))

        try:
            outcome = await self._call(keys)
            if outcome.ok:
                for request, value in zip(snapshot, outcome.values):
                    request.resolve(value)
            else:
                self._count(BATCH_FAILURES_TOTAL)
                for request in snapshot:
                    request.reject(outcome.error)  # type: ignore[arg-type]
        except asyncio.CancelledError:
            for request in snapshot:
                request.abandon()
            raise
        except BaseException as exc:
            # KeyboardInterrupt, SystemExit and friends still reach every caller.
            for request in snapshot:
                request.reject(exc)
            raise
        return outcome

    def _count(self, name: str, value: int = 1) -> None:
        try:
            self._metrics.incr(name, value, tags=self._tags)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Metrics sink failed to record %s for loader '%s'", name, self._name
            )

    async def _call(self, keys: list[K]) -> BatchOutcome[V]:
        try:
            response = self._batch_fn(keys)
            if inspect.isawaitable(response):
                response = await response
        except asyncio.CancelledError:
            raise
        # Other BaseExceptions propagate; run() settles the window before re-raising.
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Batch function for loader '%s' failed (%d key(s))",
                self._name,
                len(keys),
            )
            return BatchOutcome.failure(exc)

        try:
            values = self._align(keys, response)
        except (BatchLengthMismatchError, BatchResponseTypeError) as exc:
            logger.error("%s", exc)
            return BatchOutcome.failure(exc)
        return BatchOutcome.success(values)

    def _align(self, keys: list[K], response: object) -> list[V | None]:
        if not isinstance(response, Sequence) or isinstance(
            response, (str, bytes, bytearray)
        ):
            raise BatchResponseTypeError(received=type(response), loader=self._name)

        values: list[V | None] = list(response)
        expected = len(keys)
        received = len(values)
        if received == expected:
            return values

        if self._config.strict_length:
            raise BatchLengthMismatchError(
                expected=expected, received=received, loader=self._name
            )

        logger.warning(
            "Batch function for loader '%s' returned %d value(s) for %d key(s)",
            self._name,
            received,
            expected,
        )
        if received < expected:
            self._count(MISSING_VALUES_TOTAL, expected - received)
            values.extend([None] * (expected - received))
            return values

        self._count(EXTRA_VALUES_TOTAL, received - expected)
        return values[:expected]
