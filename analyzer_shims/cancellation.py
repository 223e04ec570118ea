"""
analyzer_shims/cancellation.py
══════════════════════════════

Cooperative cancellation signal handed to analyzers and generators by the
host.  Work that observes a token polls it at stage boundaries and abandons
the run by raising :class:`OperationCanceledError`.
"""

from __future__ import annotations

import threading
from typing import Optional

__all__ = [
    "CancellationToken",
    "OperationCanceledError",
    "throw_if_canceled",
]


class OperationCanceledError(Exception):
    """Raised when a host-supplied cancellation token has been signalled."""

    def __init__(self, message: str = "The operation was canceled.") -> None:
        super().__init__(message)


class CancellationToken:
    """
    A one-shot, thread-safe cancellation flag.

    Usage
    -----
    >>> token = CancellationToken()
    >>> token.is_cancellation_requested
    False
    >>> token.cancel()
    >>> token.throw_if_cancellation_requested()
    Traceback (most recent call last):
        ...
    analyzer_shims.cancellation.OperationCanceledError: The operation was canceled.
    """

    __slots__ = ("_event", "_can_be_canceled")

    def __init__(self, *, can_be_canceled: bool = True) -> None:
        self._event = threading.Event()
        self._can_be_canceled = can_be_canceled

    @classmethod
    def none(cls) -> "CancellationToken":
        """A token that can never be signalled."""
        return cls(can_be_canceled=False)

    @property
    def can_be_canceled(self) -> bool:
        return self._can_be_canceled

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if not self._can_be_canceled:
            raise ValueError("CancellationToken.none() cannot be canceled")
        self._event.set()

    def throw_if_cancellation_requested(self) -> None:
        if self._event.is_set():
            raise OperationCanceledError()

    def __repr__(self) -> str:
        state = "canceled" if self.is_cancellation_requested else "active"
        return f"<CancellationToken {state}>"


def throw_if_canceled(token: Optional[CancellationToken]) -> None:
    """Poll *token* when one was supplied."""
    if token is not None:
        token.throw_if_cancellation_requested()
