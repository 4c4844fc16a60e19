"""Tests for CallContext deadlines and cancellation."""

from __future__ import annotations

import threading
import time

import pytest

from ambient_weather.context import CallContext
from ambient_weather.errors import ContextCancelledError, ContextTimeoutExceededError
from conftest import SteppingClock


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestDeadline:
    """Test timeout behaviour."""

    def test_background_never_expires(self) -> None:
        ctx = CallContext.background()
        assert ctx.remaining() is None
        assert not ctx.done
        ctx.check()

    def test_expires_after_timeout(self) -> None:
        clock = FakeClock()
        ctx = CallContext(timeout=5, clock=clock)
        assert not ctx.expired
        clock.now += 5
        assert ctx.expired
        with pytest.raises(ContextTimeoutExceededError) as exc_info:
            ctx.check()
        assert exc_info.value.timeout == 5

    def test_remaining(self) -> None:
        clock = FakeClock()
        ctx = CallContext(timeout=10, clock=clock)
        clock.now += 4
        assert ctx.remaining() == pytest.approx(6)
        clock.now += 20
        assert ctx.remaining() == 0.0

    def test_request_timeout_clamped(self) -> None:
        clock = FakeClock()
        ctx = CallContext(timeout=10, clock=clock)
        assert ctx.request_timeout(30) == pytest.approx(10)
        assert ctx.request_timeout(3) == pytest.approx(3)

    def test_request_timeout_without_deadline(self) -> None:
        assert CallContext().request_timeout(30) == 30

    def test_request_timeout_raises_when_expired(self) -> None:
        clock = FakeClock()
        ctx = CallContext(timeout=1, clock=clock)
        clock.now += 2
        with pytest.raises(ContextTimeoutExceededError):
            ctx.request_timeout(30)

    def test_request_timeout_never_zero(self) -> None:
        """The deadline passing between the check and the clamp still raises."""
        clock = SteppingClock(0.0, 5.0, 10.0)
        ctx = CallContext(timeout=10, clock=clock)
        with pytest.raises(ContextTimeoutExceededError):
            ctx.request_timeout(30)


class TestCancellation:
    """Test cooperative cancellation."""

    def test_cancel(self) -> None:
        ctx = CallContext()
        ctx.cancel()
        assert ctx.cancelled
        assert ctx.done
        with pytest.raises(ContextCancelledError):
            ctx.check()

    def test_expiry_wins_over_cancel(self) -> None:
        clock = FakeClock()
        ctx = CallContext(timeout=1, clock=clock)
        ctx.cancel()
        clock.now += 1
        assert isinstance(ctx.error(), ContextTimeoutExceededError)

    def test_error_is_none_while_running(self) -> None:
        assert CallContext().error() is None

    def test_wait_interrupted_by_cancel(self) -> None:
        ctx = CallContext()
        threading.Timer(0.05, ctx.cancel).start()
        started = time.monotonic()
        assert ctx.wait(5) is True
        assert time.monotonic() - started < 2

    def test_wait_zero_returns_state(self) -> None:
        ctx = CallContext()
        assert ctx.wait(0) is False
        ctx.cancel()
        assert ctx.wait(0) is True

    def test_wait_bounded_by_deadline(self) -> None:
        ctx = CallContext.with_timeout(0.05)
        started = time.monotonic()
        assert ctx.wait(5) is True
        assert time.monotonic() - started < 2
