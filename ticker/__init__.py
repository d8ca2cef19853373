"""
Rate-limited iteration for Python.

This package contains:
- Channels connecting the timer to the consumer (ticker.channel)
- The background timer thread (ticker.daemon)
- Blocking rate-limited iterators (ticker.ticker)
- The asyncio rendition (ticker.async_ticker)
- Logging and Prometheus metrics (ticker.observability)
"""

from .async_ticker import AsyncTicker
from .channel import Receiver, Sender, channel
from .daemon import TimerDaemon
from .exceptions import (
    ChannelDisconnectedError,
    ChannelError,
    ChannelTimeoutError,
    TickChannelClosedError,
    TickerError,
    ValidationError,
)
from .ticker import Ticker, TickIter, every
from .version import __version__

__all__ = [
    "AsyncTicker",
    "ChannelDisconnectedError",
    "ChannelError",
    "ChannelTimeoutError",
    "Receiver",
    "Sender",
    "TickChannelClosedError",
    "TickIter",
    "Ticker",
    "TickerError",
    "TimerDaemon",
    "ValidationError",
    "channel",
    "every",
    "__version__",
]
