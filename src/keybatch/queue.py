"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Ordered request queue owned by a single loader.
"""

from __future__ import annotations

from threading import Lock
from typing import Generic

from .types import K, PendingRequest, V


class RequestQueue(Generic[K, V]):
    """
    Insertion-ordered list of pending requests.

    ``drain`` swaps the live list for an empty one under the lock, so a
    snapshot never loses or duplicates a concurrent append.
    """

    def __init__(self) -> None:
        self._items: list[PendingRequest[K, V]] = []
        self._lock = Lock()

    def append(self, request: PendingRequest[K, V]) -> int:
        """Queue one request and return the new queue length."""
        with self._lock:
            self._items.append(request)
            return len(self._items)

    def drain(self) -> list[PendingRequest[K, V]]:
        """Return every queued request in order and leave the queue empty."""
        with self._lock:
            snapshot = self._items
            self._items = []
        return snapshot

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __bool__(self) -> bool:
        return len(self) > 0
