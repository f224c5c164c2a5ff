"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Request-batching loader for coalescing point lookups.

Collects every ``load(key)`` issued within one event-loop batch window and
turns them into a single call to a user-supplied batch function, routing
each returned value back to its caller by position.

Quick start::

    from keybatch import Loader

    async def batch_users(ids: list[int]) -> list[User | None]:
        return await repo.get_many(ids)

    users = Loader(batch_users, name="users")
    alice, bob = await asyncio.gather(users.load(1), users.load(2))
"""

from .errors import BatchLengthMismatchError, BatchResponseTypeError, LoaderError
from .invoker import BatchInvoker
from .loader import Loader
from .metrics import LoaderMetrics, NoOpLoaderMetrics, PrometheusLoaderMetrics
from .queue import RequestQueue
from .scheduler import FlushScheduler
from .settings import LoaderSettings
from .types import BatchFn, BatchOutcome, LoaderConfig, LoaderState, PendingRequest

__all__ = [
    "Loader",
    "LoaderConfig",
    "LoaderSettings",
    "LoaderState",
    "BatchFn",
    "BatchOutcome",
    "PendingRequest",
    "RequestQueue",
    "FlushScheduler",
    "BatchInvoker",
    "LoaderError",
    "BatchLengthMismatchError",
    "BatchResponseTypeError",
    "LoaderMetrics",
    "NoOpLoaderMetrics",
    "PrometheusLoaderMetrics",
]
