"""
Call context: an optional deadline plus cooperative cancellation.

One ``CallContext`` is threaded through every request the client makes.
Waits (request pacing, stream handoff) go through :meth:`CallContext.wait`
so that :meth:`CallContext.cancel` or an expired deadline interrupts them,
and HTTP timeouts are clamped to the time remaining.

Usage::

    ctx = CallContext.with_timeout(30)
    records = fetch_historical(client, ctx, query)
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from ambient_weather.errors import (
    ContextCancelledError,
    ContextError,
    ContextTimeoutExceededError,
)


class CallContext:
    """Deadline + cancellation flag shared by the calls of one session."""

    def __init__(
        self,
        timeout: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout = timeout
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> CallContext:
        """Context that never expires on its own."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> CallContext:
        return cls(timeout=seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def error(self) -> ContextError | None:
        """The error describing why the context finished; expiry wins over cancellation."""
        if self.expired:
            return ContextTimeoutExceededError(self.timeout)
        if self.cancelled:
            return ContextCancelledError()
        return None

    def check(self) -> None:
        """Raise the context's error if it is finished."""
        error = self.error()
        if error is not None:
            raise error

    def request_timeout(self, default: float) -> float:
        """
        Per-request timeout: ``default`` clamped to the time remaining.

        Raises ``ContextTimeoutExceededError`` rather than returning zero when
        the deadline passes between the check and the clamp.
        """
        self.check()
        remaining = self.remaining()
        if remaining is None:
            return default
        if remaining <= 0:
            raise ContextTimeoutExceededError(self.timeout)
        return min(default, remaining)

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to ``seconds``, waking early on cancellation or deadline.

        Returns True if the context finished during (or before) the wait.
        """
        if seconds <= 0:
            return self.done
        remaining = self.remaining()
        if remaining is None or seconds < remaining:
            self._cancelled.wait(seconds)
            return self.done
        # The deadline comes first: sleep until it has really passed.
        while not self.done:
            self._cancelled.wait(self.remaining())
        return True
