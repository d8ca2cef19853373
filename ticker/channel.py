"""
Single-producer/single-consumer channel.

An ordered, unbounded conduit built on ``queue.Queue`` with explicit
disconnection: the receiving end learns when the sender is gone, and the
sending end learns when the receiver is gone.

Example:
    send, recv = channel()
    send.send("tick")
    recv.recv()                # "tick"
    send.close()
    recv.recv()                # raises ChannelDisconnectedError
"""

import queue
import threading
from typing import Generic, Optional, Tuple, TypeVar

from .exceptions import ChannelDisconnectedError, ChannelTimeoutError

T = TypeVar("T")

# End-of-stream marker queued when the sender closes
_CLOSED = object()


class _Link:
    """The queue and disconnection flags behind one channel."""

    __slots__ = ("queue", "sender_closed", "receiver_closed")

    def __init__(self):
        self.queue: queue.Queue = queue.Queue()
        self.sender_closed = threading.Event()
        self.receiver_closed = threading.Event()


class Sender(Generic[T]):
    """Sending end of a channel."""

    def __init__(self, link: _Link):
        self._link = link

    @property
    def closed(self) -> bool:
        return self._link.sender_closed.is_set()

    def send(self, item: T) -> None:
        """
        Enqueue an item. Never blocks.

        Raises:
            ChannelDisconnectedError: If either end has been closed
        """
        if self._link.sender_closed.is_set():
            raise ChannelDisconnectedError("Send on a closed sender")
        if self._link.receiver_closed.is_set():
            raise ChannelDisconnectedError("Receiver is gone")
        self._link.queue.put(item)

    def close(self) -> None:
        """Drop this end. Items already sent stay receivable."""
        if self._link.sender_closed.is_set():
            return
        self._link.sender_closed.set()
        self._link.queue.put(_CLOSED)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class Receiver(Generic[T]):
    """Receiving end of a channel."""

    def __init__(self, link: _Link):
        self._link = link
        self._disconnected = False

    @property
    def closed(self) -> bool:
        return self._link.receiver_closed.is_set()

    def recv(self, timeout: Optional[float] = None) -> T:
        """
        Block until an item arrives.

        Args:
            timeout: Seconds to wait; None waits forever

        Raises:
            ChannelTimeoutError: If nothing arrived within ``timeout``
            ChannelDisconnectedError: If the sender closed and everything it
                sent has been received, or this end was closed
        """
        if self._link.receiver_closed.is_set():
            raise ChannelDisconnectedError("Receive on a closed receiver")
        if self._disconnected:
            raise ChannelDisconnectedError("Sender is gone")

        try:
            item = self._link.queue.get(timeout=timeout)
        except queue.Empty:
            raise ChannelTimeoutError(f"No item within {timeout}s", {"timeout": timeout}) from None

        if item is _CLOSED:
            self._disconnected = True
            raise ChannelDisconnectedError("Sender is gone")
        return item

    def close(self) -> None:
        """Drop this end. Later sends fail."""
        self._link.receiver_closed.set()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def channel() -> Tuple[Sender, Receiver]:
    """Create a connected (sender, receiver) pair."""
    link = _Link()
    return Sender(link), Receiver(link)
