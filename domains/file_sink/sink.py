"""
File sink pipeline.

Resolves a target for every inbound message and writes the payload there.
Failures are logged with the message id and target and re-raised to the
caller; they never affect other messages.
"""

from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from app.models.schemas import Message
from app.utils.config import FileSinkSettings
from domains.file_sink.errors import ResolutionError, WriteError
from domains.file_sink.expressions import ExpressionEvaluator
from domains.file_sink.resolver import SinkResolver
from domains.file_sink.writer import FileWriter


class FileSink:
    """Message-to-file sink."""

    def __init__(
        self,
        settings: FileSinkSettings,
        evaluator: Optional[ExpressionEvaluator] = None,
    ):
        self.settings = settings
        self.resolver = SinkResolver(settings, evaluator)
        self.writer = FileWriter(
            binary=settings.binary,
            charset=settings.charset,
            mode=settings.mode,
        )

        self.written = 0
        self.dropped = 0
        self.failed = 0
        self.last_error: Optional[str] = None

    def handle(self, message: Message) -> Optional[Path]:
        """
        Resolve and write one message.

        Returns:
            The written path, or None when skipped by the file-exists mode

        Raises:
            ResolutionError: Message cannot be placed; it is dropped, not retried
            WriteError: Filesystem failure; the message is unacknowledged
        """
        message_id = message.header("id")

        try:
            target = self.resolver.resolve(message)
        except ResolutionError as e:
            self.dropped += 1
            self.last_error = str(e)
            logger.error(f"Dropping message {message_id}: {e}")
            raise

        try:
            path = self.writer.write(target, message)
        except WriteError as e:
            self.failed += 1
            self.last_error = str(e)
            logger.error(f"Write failed for message {message_id} -> {target.path}: {e}")
            raise

        if path is not None:
            self.written += 1
            logger.info(f"Message {message_id} written to {path}")
        return path

    def stats(self) -> Dict[str, object]:
        return {
            "directory": self.settings.directory_expression or str(self.settings.directory),
            "binary": self.settings.binary,
            "mode": self.writer.mode.value,
            "written": self.written,
            "dropped": self.dropped,
            "failed": self.failed,
            "last_error": self.last_error,
        }
