"""
Connector runtime.

Builds the enabled connectors from settings and wires them through one
bounded channel: the file source publishes to it and the file sink consumes
from it. When only the source is enabled, a logging consumer drains the
channel instead.
"""

from typing import Dict, Optional

from loguru import logger

from app.models.schemas import FILENAME, Message
from app.utils.channel import ChannelConsumer, MessageChannel
from app.utils.config import (
    FileSinkSettings,
    FileSourceSettings,
    Settings,
    get_settings,
    get_sink_settings,
    get_source_settings,
)
from domains.file_sink.sink import FileSink
from domains.file_source.source import FileSource


def log_message(message: Message) -> None:
    """Consumer handler that logs a short description of each message."""
    payload = message.payload
    size = len(payload) if isinstance(payload, (bytes, str)) else None
    logger.info(
        f"Message {message.header('id')} from {message.header(FILENAME)} "
        f"({type(payload).__name__}, size={size})"
    )


class ConnectorRuntime:
    """Owns the channel, the enabled connectors and their threads."""

    def __init__(
        self,
        settings: Settings,
        source_settings: Optional[FileSourceSettings] = None,
        sink_settings: Optional[FileSinkSettings] = None,
    ):
        self.settings = settings
        self.channel = MessageChannel(capacity=settings.channel_capacity)

        self.source: Optional[FileSource] = None
        self.sink: Optional[FileSink] = None

        if settings.source_enabled:
            self.source = FileSource(
                source_settings or get_source_settings(),
                self.channel,
                send_timeout=settings.send_timeout,
            )

        if settings.sink_enabled:
            self.sink = FileSink(sink_settings or get_sink_settings())
            self.consumer = ChannelConsumer(self.channel, self.sink.handle, name="file-sink")
        else:
            self.consumer = ChannelConsumer(self.channel, log_message, name="log")

    @classmethod
    def from_settings(cls) -> "ConnectorRuntime":
        return cls(get_settings())

    def start(self) -> None:
        """Start the consumer, then the source trigger."""
        self.consumer.start()
        if self.source is not None:
            self.source.start()
        logger.success("Connector runtime started")

    def stop(self) -> None:
        """Stop the source first so no new messages are produced, then the consumer."""
        if self.source is not None:
            self.source.stop()
        self.consumer.stop()
        logger.success("Connector runtime stopped")

    def stats(self) -> Dict[str, object]:
        return {
            "channel": {
                "name": self.channel.name,
                "depth": len(self.channel),
                "capacity": self.channel.capacity,
            },
            "consumer": {
                "name": self.consumer.name,
                "running": self.consumer.running,
                "handled": self.consumer.handled,
                "failed": self.consumer.failed,
            },
            "source": self.source.stats() if self.source else None,
            "sink": self.sink.stats() if self.sink else None,
        }
