"""
Rate-limited async iteration.

Same contract as ``Ticker``, with the timer running as an asyncio task that
waits on an ``asyncio.Event`` and feeds an unbounded ``asyncio.Queue``.

    async for i in AsyncTicker(range(10), 1.0):
        print(i)
"""

import asyncio
import logging
import time
import weakref
from typing import Any, AsyncIterable, Dict, Generic, Iterable, Optional, Set, TypeVar, Union

from config import ticker as ticker_config

from .daemon import EXIT_SHUTDOWN
from .exceptions import TickChannelClosedError, TickerError, create_validation_error
from .observability.metrics import (
    record_daemon_started,
    record_daemon_stopped,
    record_item_yielded,
    record_tick_consumed,
    record_tick_emitted,
)
from .ticker import Interval, coerce_interval

T = TypeVar("T")

EXIT_CANCELLED = "cancelled"

# End-of-stream marker queued when the timer task finishes
_CLOSED = object()

# Strong references to running timer tasks; the handle does not keep one
_background_tasks: Set[asyncio.Task] = set()

logger = logging.getLogger("AsyncTicker")


async def _tick_loop(ticks: asyncio.Queue, stop: asyncio.Event, interval: float, name: str):
    """Timer task body: one tick per interval until ``stop`` is set."""
    loop = asyncio.get_running_loop()
    record_daemon_started(name)
    reason = EXIT_SHUTDOWN

    try:
        while True:
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                ticks.put_nowait(loop.time())
                record_tick_emitted(name)
            else:
                break
    except asyncio.CancelledError:
        reason = EXIT_CANCELLED
        raise
    finally:
        ticks.put_nowait(_CLOSED)
        record_daemon_stopped(name, reason)
        logger.debug(f"🛑 Timer task for '{name}' stopped ({reason})")


def _request_stop(loop: asyncio.AbstractEventLoop, stop: asyncio.Event):
    if loop.is_closed():
        return
    loop.call_soon_threadsafe(stop.set)


class AsyncTicker(Generic[T]):
    """
    Async rate limiter: ``__anext__`` resolves at most once per interval.

    Must be created inside a running event loop. The timer task is started
    immediately and is never awaited by the handle; ``close()`` only signals
    it. The source may be a regular or an async iterable.

    Example:
        async with AsyncTicker(symbols, 0.5, name="poller") as ticker:
            async for symbol in ticker:
                await refresh(symbol)
    """

    def __init__(self, src: Union[Iterable[T], AsyncIterable[T]], interval: Interval, name: Optional[str] = None):
        """
        Initialize and start ticking.

        Args:
            src: Iterable or async iterable; owned by the ticker from now on
            interval: Seconds (int/float) or a timedelta; must be > 0
            name: Label for logs and metrics

        Raises:
            ValidationError: On a bad interval or name
            TickerError: If no event loop is running
        """
        self.interval = coerce_interval(interval)
        self.name = ticker_config.DEFAULT_TICKER_NAME if name is None else name
        if not isinstance(self.name, str) or not self.name:
            raise create_validation_error("name", name, "must be a non-empty string")

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise TickerError("AsyncTicker requires a running event loop", {"ticker": self.name}) from e

        if hasattr(src, "__aiter__"):
            self._src = src.__aiter__()
            self._src_is_async = True
        else:
            self._src = iter(src)
            self._src_is_async = False

        self._ticks: asyncio.Queue = asyncio.Queue()
        stop = asyncio.Event()
        task = loop.create_task(_tick_loop(self._ticks, stop, self.interval, self.name))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

        self._finalizer = weakref.finalize(self, _request_stop, loop, stop)
        self._exhausted = False
        self._items_yielded = 0
        self._ticks_received = 0
        self._started_at = time.monotonic()

        logger.debug(f"⏱️ AsyncTicker '{self.name}' started (interval: {self.interval}s)")

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self):
        """Signal the timer task to stop. Idempotent, does not wait."""
        if self._finalizer.alive:
            self._finalizer()
            logger.debug(f"🛑 AsyncTicker '{self.name}' closed")

    async def aclose(self):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __aiter__(self) -> "AsyncTicker[T]":
        return self

    async def __anext__(self) -> T:
        if self._exhausted:
            raise StopAsyncIteration
        if self.closed:
            raise TickChannelClosedError("AsyncTicker used after close", {"ticker": self.name})

        emitted_at = await self._ticks.get()
        if emitted_at is _CLOSED:
            # Leave the marker for any later call
            self._ticks.put_nowait(_CLOSED)
            raise TickChannelClosedError("Timer task stopped while the ticker is live", {"ticker": self.name})
        self._ticks_received += 1
        record_tick_consumed(self.name, asyncio.get_running_loop().time() - emitted_at)

        try:
            if self._src_is_async:
                item = await self._src.__anext__()
            else:
                item = next(self._src)
        except (StopIteration, StopAsyncIteration):
            self._exhausted = True
            logger.debug(f"🏁 AsyncTicker '{self.name}' exhausted after {self._items_yielded} items")
            self.close()
            raise StopAsyncIteration from None

        self._items_yielded += 1
        record_item_yielded(self.name)
        return item

    def __repr__(self) -> str:
        return f"<AsyncTicker name={self.name!r} interval={self.interval}s closed={self.closed}>"

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
