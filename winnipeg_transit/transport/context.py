"""Cancellation and deadline signal carried by every request."""

import threading
import time
from collections.abc import Callable

from winnipeg_transit.transport.errors import (
    ContextCanceledError,
    DeadlineExceededError,
    RequestCancelledError,
)


class RequestContext:
    """Caller-controlled cancellation signal with an optional deadline.

    A context is done once cancel() has been called or its deadline has
    passed. Contexts are safe to share between threads and may be reused
    for several requests.
    """

    def __init__(self, deadline: float | None = None) -> None:
        """Initialize the context.

        Args:
            deadline: Absolute time.monotonic() value after which the
                context is done, or None for no deadline.
        """
        self._deadline = deadline
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def background(cls) -> "RequestContext":
        """Create a context that is never done unless canceled."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        """Create a context that expires after the given number of seconds."""
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def with_deadline(cls, deadline: float) -> "RequestContext":
        """Create a context that expires at an absolute monotonic time."""
        return cls(deadline=deadline)

    @property
    def deadline(self) -> float | None:
        """Absolute monotonic deadline, if any."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        """Whether cancel() has been called."""
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        """Whether the deadline has passed."""
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        """Whether the context has been canceled or has expired."""
        return self.cancelled or self.expired

    def cancel(self) -> None:
        """Cancel the context and wake every waiter."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def err(self) -> RequestCancelledError | None:
        """Return the reason the context is done, or None while it is live.

        Cancellation wins over an expired deadline.
        """
        if self.cancelled:
            return ContextCanceledError()
        if self.expired:
            return DeadlineExceededError()
        return None

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), or None."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback to run when the context is canceled.

        The callback runs immediately if the context is already canceled.

        Args:
            callback: Zero-argument callable.

        Returns:
            Function that unregisters the callback.
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
