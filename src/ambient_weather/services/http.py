"""
Shared HTTP transport with automatic retry and bounded backoff.

Provides a pre-configured ``requests.Session`` that retries on the responses
the Ambient Weather API uses for transient trouble (408, 429 and every 5xx)
plus connection errors, sleeping between attempts with exponential backoff
clamped to ``[min_backoff, max_backoff]``.

While a call runs inside ``bind_context(ctx)`` the retry policy follows that
``CallContext``: backoff sleeps wake up (and raise) on cancellation or expiry,
and no further attempt is made once the context is done.

The knobs live in an explicit :class:`TransportConfig` so tests can pass tiny
values instead of waiting on wall-clock-scale defaults::

    from ambient_weather.services.http import TransportConfig, create_session

    session = create_session(TransportConfig(retry_count=0, timeout=2))
    resp = session.get("https://rt.ambientweather.net/v1/devices", params={...})
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ambient_weather import __version__

if TYPE_CHECKING:
    from urllib3.response import BaseHTTPResponse

    from ambient_weather.context import CallContext

#: 408 Request Timeout, 429 Too Many Requests and the whole 5xx range.
RETRYABLE_STATUSES = frozenset({408, 429, *range(500, 600)})

DEFAULT_RETRY_COUNT = 3
DEFAULT_MIN_BACKOFF = 5.0  # seconds
DEFAULT_MAX_BACKOFF = 15.0  # seconds
DEFAULT_TIMEOUT = 30.0  # seconds

USER_AGENT = f"ambient-weather/{__version__}"

_bound_context: ContextVar[CallContext | None] = ContextVar("bound_context", default=None)


@dataclass(frozen=True)
class TransportConfig:
    """Retry and timeout settings for one transport."""

    retry_count: int = DEFAULT_RETRY_COUNT
    min_backoff: float = DEFAULT_MIN_BACKOFF
    max_backoff: float = DEFAULT_MAX_BACKOFF
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError(f"retry_count must be >= 0, got {self.retry_count}")
        if not 0 <= self.min_backoff <= self.max_backoff:
            raise ValueError(
                f"backoff bounds must satisfy 0 <= min <= max, "
                f"got {self.min_backoff}..{self.max_backoff}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")


class BoundedRetry(Retry):
    """
    ``Retry`` whose sleeps never leave ``[backoff_factor, backoff_max]``.

    Stock urllib3 skips the sleep before the first retry; the remote API asks
    for at least a few seconds between attempts, so the floor applies there too.
    """

    def get_backoff_time(self) -> float:
        backoff = super().get_backoff_time()
        return float(min(max(backoff, self.backoff_factor), self.backoff_max))

    def is_exhausted(self) -> bool:
        ctx = _bound_context.get()
        if ctx is not None and ctx.done:
            return True
        return super().is_exhausted()

    def sleep(self, response: BaseHTTPResponse | None = None) -> None:
        """Back off before the next attempt; raises if the bound context finishes first."""
        ctx = _bound_context.get()
        if ctx is None:
            super().sleep(response)
            return
        delay = None
        if response is not None and self.respect_retry_after_header:
            delay = self.get_retry_after(response)
        if delay is None:
            delay = self.get_backoff_time()
        if ctx.wait(delay):
            ctx.check()


@contextmanager
def bind_context(ctx: CallContext) -> Iterator[None]:
    """Make retries on this thread follow ``ctx`` until the block exits."""
    token = _bound_context.set(ctx)
    try:
        yield
    finally:
        _bound_context.reset(token)


def build_retry(config: TransportConfig) -> Retry:
    """Retry strategy for ``config``."""
    return BoundedRetry(
        total=config.retry_count,
        backoff_factor=config.min_backoff,
        backoff_max=config.max_backoff,
        status_forcelist=sorted(RETRYABLE_STATUSES),
        allowed_methods=["GET"],
        respect_retry_after_header=False,
        raise_on_status=False,  # the client maps the final status itself
    )


def create_session(config: TransportConfig | None = None) -> requests.Session:
    """
    Build a ``requests.Session`` with the retry adapter mounted.

    Args:
        config: Retry/timeout settings (defaults to ``TransportConfig()``).
    """
    config = config or TransportConfig()
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=build_retry(config))
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT
    s.headers["Accept"] = "application/json"

    # Inject a default timeout so callers don't need to remember to pass
    # ``timeout=`` every time.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", config.timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s
