"""
In-process message channels.

A ``MessageChannel`` is a bounded FIFO between a producer (the file source)
and a consumer. ``ChannelConsumer`` drains a channel on a background thread and
hands every message to a handler such as ``FileSink.handle``.
"""

import queue
import threading
from typing import Callable, Optional

from loguru import logger

from app.models.schemas import Message
from app.utils.errors import ChannelFullError, ConnectorError


class MessageChannel:
    """Bounded message queue with timed send and receive."""

    def __init__(self, capacity: int = 1000, name: str = "output"):
        """
        Initialize channel.

        Args:
            capacity: Maximum number of queued messages
            name: Channel name used in log output
        """
        self.name = name
        self.capacity = capacity
        self._queue: "queue.Queue[Message]" = queue.Queue(maxsize=capacity)

    def send(self, message: Message, timeout: Optional[float] = None) -> None:
        """
        Put a message on the channel.

        Raises:
            ChannelFullError: If the channel stayed full for ``timeout`` seconds
        """
        try:
            self._queue.put(message, timeout=timeout)
        except queue.Full as e:
            raise ChannelFullError(
                f"Channel '{self.name}' full (capacity {self.capacity})"
            ) from e

    def receive(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Take the next message, or return None when ``timeout`` elapses."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def __len__(self) -> int:
        return self._queue.qsize()


class ChannelConsumer:
    """Background thread that drains a channel into a handler."""

    def __init__(
        self,
        channel: MessageChannel,
        handler: Callable[[Message], object],
        poll_timeout: float = 0.1,
        name: str = "consumer",
    ):
        self.channel = channel
        self.handler = handler
        self.poll_timeout = poll_timeout
        self.name = name

        self.handled = 0
        self.failed = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start draining the channel."""
        if self.running:
            logger.warning(f"Consumer '{self.name}' is already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"channel-{self.name}", daemon=True
        )
        self._thread.start()
        logger.info(f"Consumer '{self.name}' started on channel '{self.channel.name}'")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop draining; the message being handled completes first."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Consumer '{self.name}' still handling a message after {timeout}s")
                return
            self._thread = None
        logger.info(f"Consumer '{self.name}' stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            message = self.channel.receive(timeout=self.poll_timeout)
            if message is None:
                continue
            self.dispatch(message)

    def dispatch(self, message: Message) -> None:
        """Hand one message to the handler; failures never stop the consumer."""
        try:
            self.handler(message)
            self.handled += 1
        except ConnectorError as e:
            self.failed += 1
            logger.error(f"Consumer '{self.name}' failed message {message.header('id')}: {e}")
        except Exception as e:
            self.failed += 1
            logger.exception(
                f"Unexpected error in consumer '{self.name}' "
                f"for message {message.header('id')}: {e}"
            )
