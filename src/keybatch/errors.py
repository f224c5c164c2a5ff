"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Exceptions raised by the loader when a batch response breaks its contract.
"""

from __future__ import annotations


class LoaderError(RuntimeError):
    """Base class for loader-level failures."""


class BatchLengthMismatchError(LoaderError):
    """Raised in strict mode when a batch returns the wrong number of values."""

    def __init__(self, *, expected: int, received: int, loader: str) -> None:
        super().__init__(
            f"Batch function for loader '{loader}' returned {received} value(s) "
            f"for {expected} key(s)"
        )
        self.expected = expected
        self.received = received
        self.loader = loader


class BatchResponseTypeError(LoaderError):
    """Raised when a batch function returns something other than a sequence."""

    def __init__(self, *, received: type, loader: str) -> None:
        super().__init__(
            f"Batch function for loader '{loader}' must return a sequence, "
            f"got {received.__name__}"
        )
        self.received = received
        self.loader = loader
