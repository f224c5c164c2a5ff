"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Core loader types: pending requests, batch outcomes and configuration.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

K = TypeVar("K")
V = TypeVar("V")

# Batch functions may be coroutines or plain callables returning a sequence.
BatchFn = Callable[[list[K]], Awaitable[Sequence[V]] | Sequence[V]]

LoaderState = Literal["idle", "armed", "flushing"]


@dataclass(frozen=True, slots=True)
class LoaderConfig:
    """
    Per-loader batching controls.

    Attributes:
        defer_ticks: Number of ``call_soon`` hops between arming and flushing.
            Two hops drain already-pending continuations and then one more
            loop turn.
        strict_length: When True, a response whose length differs from the
            key list fails the whole window instead of padding with ``None``.
    """

    defer_ticks: int = 2
    strict_length: bool = False

    def __post_init__(self) -> None:
        if self.defer_ticks < 1:
            raise ValueError("defer_ticks must be >= 1")


@dataclass(slots=True)
class PendingRequest(Generic[K, V]):
    """One queued key and the future its caller is waiting on."""

    key: K
    sink: asyncio.Future[V]

    @property
    def is_settled(self) -> bool:
        return self.sink.done()

    def resolve(self, value: V) -> bool:
        """Deliver `value` unless the sink was already settled."""
        if self.sink.done():
            return False
        self.sink.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        """Deliver `error` unless the sink was already settled."""
        if self.sink.done():
            return False
        self.sink.set_exception(error)
        return True

    def abandon(self) -> bool:
        if self.sink.done():
            return False
        return self.sink.cancel()


@dataclass(frozen=True, slots=True)
class BatchOutcome(Generic[V]):
    """Tagged result of one batch call: either `values` or `error`."""

    values: tuple[V | None, ...] = ()
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, values: Sequence[V | None]) -> BatchOutcome[V]:
        return cls(values=tuple(values))

    @classmethod
    def failure(cls, error: BaseException) -> BatchOutcome[V]:
        return cls(error=error)
