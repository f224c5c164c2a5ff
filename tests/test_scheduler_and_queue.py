from __future__ import annotations

import asyncio

import pytest

from keybatch import FlushScheduler, LoaderConfig, PendingRequest, RequestQueue


def run_async(coro):
    return asyncio.run(coro)


def test_scheduler_fires_once_per_arming():
    async def scenario() -> None:
        fired: list[int] = []
        scheduler = FlushScheduler(lambda: fired.append(1))
        loop = asyncio.get_running_loop()

        assert scheduler.arm(loop) is True
        assert scheduler.arm(loop) is False
        assert scheduler.armed

        for _ in range(3):
            await asyncio.sleep(0)
        assert fired == [1]
        assert not scheduler.armed

        assert scheduler.arm(loop) is True
        for _ in range(3):
            await asyncio.sleep(0)
        assert fired == [1, 1]

    run_async(scenario())


def test_scheduler_waits_for_configured_ticks():
    async def scenario() -> None:
        order: list[str] = []
        loop = asyncio.get_running_loop()
        scheduler = FlushScheduler(lambda: order.append("flush"), ticks=3)

        scheduler.arm(loop)
        loop.call_soon(order.append, "tick-1")
        loop.call_soon(lambda: loop.call_soon(order.append, "tick-2"))

        for _ in range(5):
            await asyncio.sleep(0)
        assert order == ["tick-1", "tick-2", "flush"]

    run_async(scenario())


def test_flush_callback_may_rearm():
    async def scenario() -> None:
        loop = asyncio.get_running_loop()
        fired: list[int] = []

        def flush() -> None:
            fired.append(len(fired))
            if len(fired) == 1:
                assert scheduler.arm(loop) is True

        scheduler = FlushScheduler(flush)
        scheduler.arm(loop)
        for _ in range(6):
            await asyncio.sleep(0)
        assert fired == [0, 1]

    run_async(scenario())


def test_invalid_tick_counts_are_rejected():
    with pytest.raises(ValueError):
        FlushScheduler(lambda: None, ticks=0)
    with pytest.raises(ValueError):
        LoaderConfig(defer_ticks=0)


def test_queue_drain_returns_insertion_order_and_clears():
    async def scenario() -> None:
        loop = asyncio.get_running_loop()
        queue: RequestQueue[str, str] = RequestQueue()
        assert not queue

        for key in ("b", "a", "b"):
            queue.append(PendingRequest(key=key, sink=loop.create_future()))
        assert len(queue) == 3

        snapshot = queue.drain()
        assert [request.key for request in snapshot] == ["b", "a", "b"]
        assert len(queue) == 0
        assert queue.drain() == []

        queue.append(PendingRequest(key="c", sink=loop.create_future()))
        assert [request.key for request in snapshot] == ["b", "a", "b"]

    run_async(scenario())


def test_pending_request_settles_once():
    async def scenario() -> None:
        loop = asyncio.get_running_loop()
        request = PendingRequest(key=1, sink=loop.create_future())

        assert request.resolve("value") is True
        assert request.resolve("again") is False
        assert request.reject(RuntimeError("late")) is False
        assert request.abandon() is False
        assert request.is_settled
        assert request.sink.result() == "value"

    run_async(scenario())
