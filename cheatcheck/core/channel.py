"""
Multi-producer, single-consumer result channel.

Each worker holds its own ``Sender``. The channel closes itself when the last
sender is released, and iteration on the receiving side ends once everything
sent before that point has been consumed. No counted barrier or explicit
shutdown message is required from the producers.
"""

import queue
import threading
from typing import Any, Iterator

_CLOSED = object()


class Sender:
    """Sending handle; release it with ``close()`` or by leaving ``with``."""

    def __init__(self, channel: "ResultChannel"):
        self._channel = channel
        self._closed = False

    def send(self, item: Any) -> None:
        if self._closed:
            raise RuntimeError("Cannot send on a closed sender")
        self._channel._queue.put(item)

    def close(self) -> None:
        """Release the handle. Closing twice is a no-op."""
        if not self._closed:
            self._closed = True
            self._channel._release()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "Sender":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class ResultChannel:
    """
    Fan-in channel between the worker pool and the aggregator.

    All senders must be created before the first one can be released,
    otherwise the channel could close early.
    """

    def __init__(self):
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._senders = 0
        self._closed = False

    def sender(self) -> Sender:
        """Hand out a new sending handle."""
        with self._lock:
            if self._closed:
                raise RuntimeError("Channel already closed")
            self._senders += 1
        return Sender(self)

    def _release(self) -> None:
        with self._lock:
            self._senders -= 1
            if self._senders == 0:
                self._closed = True
                self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Any]:
        """Yield items until every sender has been released."""
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item
