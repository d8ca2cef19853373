"""
Timer Daemon.
Emit one tick per interval on a channel until told to stop.
"""

import logging
import threading
import time

from .channel import Receiver, Sender
from .exceptions import ChannelDisconnectedError, ChannelTimeoutError
from .observability.metrics import record_daemon_started, record_daemon_stopped, record_tick_emitted

# Exit reasons, also used as metric label values
EXIT_SHUTDOWN = "shutdown"
EXIT_SHUTDOWN_DISCONNECTED = "shutdown_disconnected"
EXIT_CONSUMER_GONE = "consumer_gone"


class TimerDaemon(threading.Thread):
    """
    A background thread that ticks at a fixed interval.

    It waits on the shutdown channel with a timeout of one interval. Each
    timeout sends one tick (a ``time.monotonic()`` timestamp) on the tick
    channel. A shutdown signal, a disconnected shutdown channel or a failed
    tick send ends the loop. None of these are errors.

    The thread is a daemon thread and is never joined by its owner.
    """

    def __init__(
        self,
        ticks: Sender,
        shutdown: Receiver,
        interval: float,
        ticker_name: str,
        thread_name: str,
    ):
        """
        Initialize the daemon.

        Args:
            ticks: Sending end of the tick channel
            shutdown: Receiving end of the shutdown channel
            interval: Seconds between ticks
            ticker_name: Name of the owning ticker (logs and metrics)
            thread_name: Name for the thread itself
        """
        super().__init__(name=thread_name, daemon=True)
        self.interval = interval
        self.ticker_name = ticker_name
        self._ticks = ticks
        self._shutdown = shutdown
        self.logger = logging.getLogger("TimerDaemon")

    def run(self):
        """Main loop of the daemon thread."""
        record_daemon_started(self.ticker_name)
        self.logger.debug(f"🕒 {self.name} started (interval: {self.interval}s)")
        reason = EXIT_SHUTDOWN

        try:
            while True:
                try:
                    self._shutdown.recv(timeout=self.interval)
                except ChannelTimeoutError:
                    try:
                        self._ticks.send(time.monotonic())
                    except ChannelDisconnectedError:
                        reason = EXIT_CONSUMER_GONE
                        break
                    record_tick_emitted(self.ticker_name)
                except ChannelDisconnectedError:
                    reason = EXIT_SHUTDOWN_DISCONNECTED
                    break
                else:
                    reason = EXIT_SHUTDOWN
                    break
        finally:
            # A consumer still blocked on the tick channel must wake up
            self._ticks.close()
            self._shutdown.close()
            record_daemon_stopped(self.ticker_name, reason)
            self.logger.debug(f"🛑 {self.name} stopped ({reason})")
