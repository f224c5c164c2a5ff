"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Flush scheduling for loader batch windows.

A window stays open for every callback that was already runnable when the
first ``load`` happened, plus the callbacks those schedule in turn during the
next loop iteration. With the default two ticks the flush is armed as::

    loop.call_soon(lambda: loop.call_soon(flush))

The first hop runs after the ready queue present at arming time has drained;
the second waits one more turn so continuations woken by that drain can still
join the batch. Newer application work lands in the next window.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable


class FlushScheduler:
    """Arms at most one deferred flush at a time."""

    def __init__(self, flush: Callable[[], None], *, ticks: int = 2) -> None:
        if ticks < 1:
            raise ValueError("ticks must be >= 1")
        self._flush = flush
        self._ticks = ticks
        self._armed = False
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def armed(self) -> bool:
        return self._armed

    def arm(self, loop: asyncio.AbstractEventLoop) -> bool:
        """
        Schedule a flush on `loop` unless one is already pending.

        Returns:
            True when this call armed the flush, False when one was armed
            already.
        """
        if self._armed and self._loop is loop:
            return False
        # A flush armed on another (possibly closed) loop never fires here.
        self._armed = True
        self._loop = loop
        loop.call_soon(self._hop, loop, self._ticks - 1)
        return True

    def _hop(self, loop: asyncio.AbstractEventLoop, remaining: int) -> None:
        if remaining > 0:
            loop.call_soon(self._hop, loop, remaining - 1)
            return
        # Disarm before flushing so loads made during the flush open a new window.
        self._armed = False
        self._flush()
