"""
Rate-limited iteration.

A Ticker wraps an iterable and hands out at most one element per interval,
blocking the consumer in between.

Print 0-9, one number per second:

    for i in Ticker(range(10), 1.0):
        print(i)

Run some function every second, forever:

    for _ in every(1.0):
        somefunc()
"""

import itertools
import logging
import math
import numbers
import threading
import time
import weakref
from datetime import timedelta
from typing import Any, Dict, Generic, Iterable, Iterator, Optional, TypeVar, Union

from config import ticker as ticker_config

from .channel import Receiver, Sender, channel
from .daemon import TimerDaemon
from .exceptions import (
    ChannelDisconnectedError,
    TickChannelClosedError,
    TickerError,
    ValidationError,
    create_validation_error,
)
from .observability.metrics import record_item_yielded, record_tick_consumed

T = TypeVar("T")

Interval = Union[float, int, timedelta]

_daemon_seq = itertools.count(1)


def coerce_interval(interval: Interval) -> float:
    """
    Convert an interval to seconds.

    Raises:
        ValidationError: Not a number or timedelta, not finite, not > 0, or
            longer than a thread wait can block (threading.TIMEOUT_MAX)
    """
    if isinstance(interval, timedelta):
        seconds = interval.total_seconds()
    elif isinstance(interval, bool) or not isinstance(interval, numbers.Real):
        raise ValidationError(
            "Interval must be a number of seconds or a timedelta",
            {"field": "interval", "value": interval, "type": type(interval).__name__},
        )
    else:
        seconds = float(interval)

    if not math.isfinite(seconds) or seconds <= 0:
        raise create_validation_error("interval", interval, "must be finite and greater than zero")
    if seconds > threading.TIMEOUT_MAX:
        raise create_validation_error("interval", interval, "must not exceed threading.TIMEOUT_MAX")
    return seconds


def _shutdown(kill: Sender, ticks: Receiver):
    """Send the shutdown signal once and drop both ends held by the handle."""
    try:
        kill.send(None)
    except ChannelDisconnectedError:
        # Daemon already exited on its own
        pass
    kill.close()
    ticks.close()


class Ticker(Generic[T]):
    """
    Rate limits an iterable: ``next()`` unblocks at most once per interval.

    Construction starts a TimerDaemon thread that ticks immediately and keeps
    ticking whether or not anyone consumes. Unconsumed ticks queue up without
    bound, so a consumer that falls behind gets a burst of fast returns.

    Closing the handle (``close()``, leaving a ``with`` block, or the handle
    being garbage collected) sends the daemon a shutdown signal. The daemon is
    never joined; it exits on its own within one interval.

    Example:
        with Ticker(urls, timedelta(seconds=2), name="crawler") as ticker:
            for url in ticker:
                fetch(url)
    """

    def __init__(self, src: Iterable[T], interval: Interval, name: Optional[str] = None):
        """
        Initialize and start ticking.

        Args:
            src: Any finite or infinite iterable; owned by the ticker from now on
            interval: Seconds (int/float) or a timedelta; must be > 0
            name: Label for logs, metrics and the daemon thread name

        Raises:
            ValidationError: On a bad interval or name
            TypeError: If ``src`` is not iterable
        """
        self.interval = coerce_interval(interval)
        self.name = ticker_config.DEFAULT_TICKER_NAME if name is None else name
        if not isinstance(self.name, str) or not self.name:
            raise create_validation_error("name", name, "must be a non-empty string")

        self.logger = logging.getLogger("Ticker")
        self._src: Iterator[T] = iter(src)

        tick_send, self._ticks = channel()
        self._kill, kill_recv = channel()
        thread_name = f"{ticker_config.DAEMON_THREAD_PREFIX}-{self.name}-{next(_daemon_seq)}"
        TimerDaemon(tick_send, kill_recv, self.interval, self.name, thread_name).start()

        self._finalizer = weakref.finalize(self, _shutdown, self._kill, self._ticks)
        self._converted = False
        self._exhausted = False
        self._items_yielded = 0
        self._ticks_received = 0
        self._started_at = time.monotonic()

        self.logger.debug(f"⏱️ Ticker '{self.name}' started ({thread_name}, interval: {self.interval}s)")

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self):
        """Signal the daemon to stop. Idempotent, never blocks."""
        if self._finalizer.alive:
            self._finalizer()
            self.logger.debug(f"🛑 Ticker '{self.name}' closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __iter__(self) -> "TickIter[T]":
        if self._converted:
            raise TickerError("Ticker already has a consumer", {"ticker": self.name})
        self._converted = True
        return TickIter(self)

    def __repr__(self) -> str:
        return f"<Ticker name={self.name!r} interval={self.interval}s closed={self.closed}>"

    def _advance(self) -> T:
        """Wait for one tick, then step the source."""
        if self._exhausted:
            raise StopIteration
        if self.closed:
            raise TickChannelClosedError("Ticker used after close", {"ticker": self.name})

        try:
            emitted_at = self._ticks.recv()
        except ChannelDisconnectedError as e:
            raise TickChannelClosedError(
                "Timer daemon stopped while the ticker is live", {"ticker": self.name}
            ) from e
        self._ticks_received += 1
        record_tick_consumed(self.name, time.monotonic() - emitted_at)

        try:
            item = next(self._src)
        except StopIteration:
            self._exhausted = True
            self.logger.debug(f"🏁 Ticker '{self.name}' exhausted after {self._items_yielded} items")
            self.close()
            raise

        self._items_yielded += 1
        record_item_yielded(self.name)
        return item

    def get_stats(self) -> Dict[str, Any]:
        """Get consumer-side statistics."""
        elapsed = time.monotonic() - self._started_at

        return {
            "name": self.name,
            "interval": self.interval,
            "items_yielded": self._items_yielded,
            "ticks_received": self._ticks_received,
            "elapsed_seconds": elapsed,
            "rate": self._items_yielded / elapsed if elapsed > 0 else 0,
            "closed": self.closed,
        }


class TickIter(Generic[T]):
    """
    Rate-limited iterator over a Ticker; obtain it with ``iter(ticker)`` or a
    for loop.

    Each ``next()`` blocks until a tick arrives, then steps the source. When
    the source runs out the ticker is closed and every later call raises
    StopIteration at once. If the timer daemon is gone while the ticker is
    still live, TickChannelClosedError is raised instead.
    """

    def __init__(self, ticker: Ticker[T]):
        self._ticker = ticker

    @property
    def ticker(self) -> Ticker[T]:
        return self._ticker

    @property
    def closed(self) -> bool:
        return self._ticker.closed

    def __iter__(self) -> "TickIter[T]":
        return self

    def __next__(self) -> T:
        return self._ticker._advance()

    def close(self):
        """Close the owning ticker."""
        self._ticker.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def every(interval: Interval, name: Optional[str] = None) -> Ticker[int]:
    """
    Create a Ticker over 0, 1, 2, ... for run-forever loops.

    Example:
        for n in every(timedelta(minutes=5), name="heartbeat"):
            send_heartbeat(n)
    """
    return Ticker(itertools.count(), interval, name=name)
