"""
Ambient Weather Network API client.

Low-level HTTP client for the REST API: URL building, request pacing, one
GET per call, and mapping of transport failures and error-shaped bodies onto
:mod:`ambient_weather.errors`.

API docs: https://ambientweather.docs.apiary.io/
Rate limits: 1 req/s per API key (429 when exceeded)
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import requests

from ambient_weather.errors import PayloadDecodeError, TransportError, check_response
from ambient_weather.services.http import (
    RETRYABLE_STATUSES,
    TransportConfig,
    bind_context,
    create_session,
)

if TYPE_CHECKING:
    from ambient_weather.context import CallContext

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# API configuration
# ---------------------------------------------------------------------------
API_BASE = "https://rt.ambientweather.net"  # default for the CLI; AmbientClient takes any base
API_VERSION = "/v1"
DEVICES_ENDPOINT = "devices"

# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------
MIN_REQUEST_INTERVAL: float = 1.1  # seconds, stays under 1 req/s


class RateLimiter:
    """Keeps successive requests at least ``min_interval`` seconds apart."""

    def __init__(
        self,
        min_interval: float = MIN_REQUEST_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._last_request_time = -math.inf
        self._lock = threading.Lock()

    def wait(self, ctx: CallContext) -> None:
        """Sleep if needed; the sleep ends early (and raises) if ``ctx`` finishes."""
        with self._lock:
            elapsed = self._clock() - self._last_request_time
            if elapsed < self.min_interval:
                delay = self.min_interval - elapsed
                logger.debug("Pacing: sleeping %.2fs before next request", delay)
                if ctx.wait(delay):
                    ctx.check()
            self._last_request_time = self._clock()


class AmbientClient:
    """
    Client bound to one API base URL (including the version path).

    Args:
        base_url: e.g. ``https://rt.ambientweather.net/v1``.
        transport: Retry/timeout settings for the default session.
        session: Pre-built session (tests inject a mock here).
        request_interval: Minimum seconds between requests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: TransportConfig | None = None,
        session: requests.Session | None = None,
        request_interval: float = MIN_REQUEST_INTERVAL,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.transport = transport or TransportConfig()
        self.session = session if session is not None else create_session(self.transport)
        self.rate_limiter = RateLimiter(request_interval)

    def url(self, *parts: str) -> str:
        """Absolute URL for an endpoint path, e.g. ``url("devices", mac)``."""
        segments = [quote(part, safe=":") for part in parts]
        return "/".join([self.base_url, *segments])

    def get(self, ctx: CallContext, *path: str, params: dict[str, str]) -> Any:
        """
        Make one paced GET and return the decoded JSON body.

        Raises:
            ContextError: ``ctx`` finished before or during the call, whatever
                the transport returned.
            RemoteError: The body was an ``{"error": ...}`` object and the status
                was not a retryable one.
            TransportError: Retries exhausted (whatever the body) or a
                non-retryable HTTP failure.
            PayloadDecodeError: A successful response whose body is not JSON.
        """
        ctx.check()
        self.rate_limiter.wait(ctx)
        url = self.url(*path)
        timeout = ctx.request_timeout(self.transport.timeout)

        logger.debug("GET %s (endDate=%s, timeout=%.1fs)", url, params.get("endDate"), timeout)
        try:
            with bind_context(ctx):
                resp = self.session.get(url, params=params, timeout=timeout)
        except requests.RequestException as exc:
            context_error = ctx.error()
            if context_error is not None:
                raise context_error from exc
            raise TransportError(f"request to {url} failed: {exc}", url=url) from exc

        ctx.check()

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if resp.status_code in RETRYABLE_STATUSES:
            raise TransportError(
                _status_message(resp.status_code, url, payload),
                status_code=resp.status_code,
                url=url,
            )
        if payload is not None:
            check_response(payload)
        if not resp.ok:
            raise TransportError(
                _status_message(resp.status_code, url, None), status_code=resp.status_code, url=url
            )
        if payload is None:
            raise PayloadDecodeError(f"non-JSON body from {url}")
        return payload

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> AmbientClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _status_message(status_code: int, url: str, payload: Any) -> str:
    """Message for a failed status, keeping any error text from the body."""
    message = f"HTTP {status_code} from {url}"
    if isinstance(payload, dict) and "error" in payload:
        detail = payload.get("message")
        message += f": {payload['error']}" + (f" ({detail})" if detail else "")
    return message
