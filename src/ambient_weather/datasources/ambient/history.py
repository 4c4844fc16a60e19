"""
Historical observations, paginated in 24-hour windows.

The API returns at most ``limit`` records ending at ``endDate`` per request,
so a date range is walked one day at a time: checkpoints start at the
session's epoch and advance by exactly one day (86,400,000 ms) until they
pass the current time.  The clock is re-read before every window, so a long
pagination also picks up days that ended after it started.

Two modes share the same checkpoint sequence:

- ``fetch_historical`` - blocking; returns every record or raises on the
  first failed window (no partial results).
- ``stream_historical`` - one background thread hands each window over a
  single-slot queue; a failure arrives in-band as the last element.

At most one request per session is in flight, and ``AmbientClient`` paces
requests to stay under the API's 1 req/s limit.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ambient_weather.dates import MS_PER_DAY, now_ms
from ambient_weather.datasources.ambient.client import DEVICES_ENDPOINT
from ambient_weather.datasources.ambient.models import DeviceRecord, parse_records
from ambient_weather.datasources.ambient.params import build_window_params
from ambient_weather.errors import AmbientWeatherError, PayloadDecodeError, TransportError

if TYPE_CHECKING:
    from types import TracebackType

    from ambient_weather.context import CallContext
    from ambient_weather.datasources.ambient.client import AmbientClient
    from ambient_weather.datasources.ambient.models import FunctionData

logger = logging.getLogger(__name__)

#: How often blocked queue operations re-check for shutdown (seconds).
HANDOFF_POLL_INTERVAL = 0.1

Clock = Callable[[], int]


# =============================================================================
# Single window
# =============================================================================


def fetch_window(client: AmbientClient, ctx: CallContext, fd: FunctionData) -> list[DeviceRecord]:
    """
    Fetch the records of the window ending at ``fd.epoch``.

    An empty list is a valid answer (nothing uploaded in that window).

    Raises:
        RequestValidationError: Missing key or MAC (before any request).
        RemoteError: The API answered with an error object.
        TransportError: Retries exhausted or non-retryable HTTP failure.
        PayloadDecodeError: Body is not a list of records.
        ContextError: ``ctx`` expired or was cancelled around the call.
    """
    params = build_window_params(fd)
    payload = client.get(ctx, DEVICES_ENDPOINT, params.mac_address, params=params.query)

    if not isinstance(payload, list):
        raise PayloadDecodeError(f"expected a list of records, got {type(payload).__name__}")
    try:
        return parse_records(payload)
    except ValidationError as exc:
        raise PayloadDecodeError(str(exc)) from exc


# =============================================================================
# Checkpoints
# =============================================================================


def iter_checkpoints(start: int, *, clock: Clock = now_ms, step: int = MS_PER_DAY) -> Iterator[int]:
    """
    Yield ``start``, ``start + step``, ... while the checkpoint is before ``clock()``.

    Yields ``ceil((now - start) / step)`` values for a fixed clock, and none
    when ``start`` is already in the future.
    """
    checkpoint = start
    while checkpoint < clock():
        yield checkpoint
        checkpoint += step


# =============================================================================
# Synchronous mode
# =============================================================================


def fetch_historical(
    client: AmbientClient,
    ctx: CallContext,
    fd: FunctionData,
    *,
    clock: Clock = now_ms,
) -> list[DeviceRecord]:
    """
    Fetch every record from ``fd.epoch`` up to now, oldest window first.

    The first failed window aborts the whole pagination and its error is
    raised; records gathered so far are discarded.
    """
    build_window_params(fd)

    logger.info("Fetching history for %s from %d", fd.mac_address, fd.epoch)
    records: list[DeviceRecord] = []
    windows = 0
    for checkpoint in iter_checkpoints(fd.epoch, clock=clock):
        ctx.check()
        try:
            window = fetch_window(client, ctx, replace(fd, epoch=checkpoint))
        except AmbientWeatherError as exc:
            logger.warning("Window ending %d failed, aborting: %s", checkpoint, exc)
            raise
        logger.debug("Window ending %d: %d record(s)", checkpoint, len(window))
        records.extend(window)
        windows += 1

    logger.info("Fetched %d record(s) in %d window(s)", len(records), windows)
    return records


# =============================================================================
# Streaming mode
# =============================================================================


@dataclass(frozen=True)
class WindowResult:
    """One element of a history stream: a window's records, or the failure that ended it."""

    checkpoint: int
    records: list[DeviceRecord] = field(default_factory=list)
    error: AmbientWeatherError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class HistoryStream:
    """
    Windows produced by a background thread, consumed by iterating.

    Elements arrive in strictly increasing checkpoint order.  The stream ends
    after the last window, or right after a ``WindowResult`` whose ``error``
    is set.  ``close()`` (or leaving the ``with`` block) stops the producer
    after its current request.
    """

    def __init__(
        self,
        client: AmbientClient,
        ctx: CallContext,
        fd: FunctionData,
        *,
        clock: Clock = now_ms,
        started: threading.Event | None = None,
    ) -> None:
        self.error: AmbientWeatherError | None = None
        self._client = client
        self._ctx = ctx
        self._fd = fd
        self._clock = clock
        self._started = started
        # ``None`` marks the end of the stream.
        self._queue: queue.Queue[WindowResult | None] = queue.Queue(maxsize=1)
        self._stop = threading.Event()
        self._finished = False
        self._thread = threading.Thread(
            target=self._produce,
            name=f"history-{fd.mac_address}",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    # -- producer ---------------------------------------------------------

    def _produce(self) -> None:
        if self._started is not None:
            self._started.set()
        checkpoint = self._fd.epoch
        try:
            for checkpoint in iter_checkpoints(self._fd.epoch, clock=self._clock):
                if self._stop.is_set():
                    return
                self._ctx.check()
                records = fetch_window(self._client, self._ctx, replace(self._fd, epoch=checkpoint))
                logger.debug("Window ending %d: %d record(s)", checkpoint, len(records))
                if not self._put(WindowResult(checkpoint, records)):
                    return
        except AmbientWeatherError as exc:
            logger.warning("Window ending %d failed, closing stream: %s", checkpoint, exc)
            self._put(WindowResult(checkpoint, error=exc))
        except Exception as exc:
            # Outside the taxonomy: still delivered in-band, never a silent end.
            logger.exception("Window ending %d failed unexpectedly", checkpoint)
            error = TransportError(f"window ending {checkpoint} failed: {exc!r}")
            error.__cause__ = exc
            self._put(WindowResult(checkpoint, error=error))
        finally:
            self._put(None)

    def _put(self, item: WindowResult | None) -> bool:
        """Hand ``item`` to the consumer; False if the stream was closed first."""
        while not self._stop.is_set():
            try:
                self._queue.put(item, timeout=HANDOFF_POLL_INTERVAL)
            except queue.Full:
                continue
            return True
        return False

    # -- consumer ---------------------------------------------------------

    def __iter__(self) -> HistoryStream:
        return self

    def __next__(self) -> WindowResult:
        while not self._finished:
            try:
                item = self._queue.get(timeout=HANDOFF_POLL_INTERVAL)
            except queue.Empty:
                if not self._thread.is_alive() and self._queue.empty():
                    self._finished = True
                continue
            if item is None:
                self._finished = True
                continue
            if item.error is not None:
                self.error = item.error
            return item
        raise StopIteration

    def records(self) -> Iterator[DeviceRecord]:
        """Flatten the stream into records, raising the terminal error if there is one."""
        for result in self:
            if result.error is not None:
                raise result.error
            yield from result.records

    def close(self) -> None:
        self._stop.set()
        self._finished = True

    def __enter__(self) -> HistoryStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def stream_historical(
    client: AmbientClient,
    ctx: CallContext,
    fd: FunctionData,
    *,
    started: threading.Event | None = None,
    clock: Clock = now_ms,
) -> HistoryStream:
    """
    Start streaming history from ``fd.epoch`` on a background thread.

    Args:
        started: Set exactly once, when the producer is running and before
            it produces its first window.  Lets the caller move on as soon as
            pagination has begun, independently of when it finishes.

    Raises:
        RequestValidationError: Missing key or MAC, raised here before the
            producer starts.
    """
    build_window_params(fd)
    stream = HistoryStream(client, ctx, fd, clock=clock, started=started)
    stream.start()
    return stream
