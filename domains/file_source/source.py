"""
File source pipeline.

Wires the directory poller, the splitter and outbound conversion to a
message channel, and drives poll cycles from a fixed-delay trigger thread:
the next cycle is scheduled only after the previous one has finished.
"""

import threading
from typing import Dict, Optional

from loguru import logger

from app.models.schemas import DiscoveredFile, WatchedDirectory
from app.utils.channel import MessageChannel
from app.utils.config import FileSourceSettings
from app.utils.errors import ChannelFullError
from domains.file_source.conversion import convert
from domains.file_source.errors import DiscoveryError, SplitError
from domains.file_source.poller import DirectoryPoller
from domains.file_source.splitter import FileSplitter


class FileSource:
    """Directory-polling file source."""

    def __init__(
        self,
        settings: FileSourceSettings,
        channel: MessageChannel,
        send_timeout: Optional[float] = 5.0,
    ):
        """
        Initialize file source.

        Args:
            settings: File source settings
            channel: Outbound channel messages are sent to
            send_timeout: Seconds to wait for room on a full channel
        """
        self.settings = settings
        self.channel = channel
        self.send_timeout = send_timeout

        trigger = settings.trigger
        self.watched = WatchedDirectory(
            path=settings.directory,
            filename_pattern=settings.filename_pattern,
            filename_regex=settings.filename_regex,
            recursive=settings.recursive,
            ignore_hidden=settings.ignore_hidden,
            poll_interval=trigger.delay_seconds,
        )
        self.poller = DirectoryPoller(
            self.watched,
            prevent_duplicates=settings.prevent_duplicates,
            max_files_per_poll=trigger.max_files_per_poll,
        )
        consumer = settings.consumer
        self.splitter = FileSplitter(
            mode=consumer.mode,
            with_markers=consumer.with_markers,
            markers_json=consumer.markers_json,
            binary=consumer.binary,
            charset=consumer.charset,
        )

        self.files_emitted = 0
        self.messages_sent = 0
        self.failures = 0
        self.last_error: Optional[str] = None

        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> int:
        """
        Run one poll cycle.

        Returns:
            Number of messages sent to the channel
        """
        with self._cycle_lock:
            try:
                discovered = self.poller.poll()
            except DiscoveryError as e:
                self._record_failure(e)
                logger.warning(f"Directory poll failed, retrying next cycle: {e}")
                return 0

            sent = 0
            for item in discovered:
                sent += self._emit(item)
            return sent

    def _emit(self, discovered: DiscoveredFile) -> int:
        try:
            messages = self.splitter.build(discovered)
        except SplitError as e:
            self._record_failure(e)
            if self.settings.retry_failed_files:
                logger.warning(f"{e}; retrying next cycle")
            else:
                self.poller.acknowledge(discovered)
                logger.error(f"{e}; skipping file")
            return 0

        sent = 0
        try:
            for message in messages:
                self.channel.send(
                    convert(message, self.settings.content_type),
                    timeout=self.send_timeout,
                )
                sent += 1
        except ChannelFullError as e:
            # Messages already sent stay sent; the file is redelivered whole
            self._record_failure(e)
            logger.error(f"Could not emit {discovered.path} ({sent}/{len(messages)} sent): {e}")
            self.messages_sent += sent
            return sent

        self.poller.acknowledge(discovered)
        self.files_emitted += 1
        self.messages_sent += sent
        logger.info(f"Emitted {discovered.relative_path} as {sent} message(s)")
        return sent

    def _record_failure(self, error: Exception) -> None:
        self.failures += 1
        self.last_error = str(error)

    def reset(self) -> None:
        """Forget every emitted file so the whole directory is emitted again."""
        with self._cycle_lock:
            self.poller.reset()
        logger.info(f"Seen-set cleared for {self.poller.root}")

    def start(self) -> None:
        """Start the fixed-delay trigger thread."""
        if self.running:
            logger.warning("File source is already running")
            return

        self.poller.root.mkdir(parents=True, exist_ok=True)
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="file-source-trigger", daemon=True
        )
        self._thread.start()
        logger.success(
            f"File source watching {self.poller.root} "
            f"every {self.watched.poll_interval}s ({self.splitter.mode.value} mode)"
        )

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the trigger thread; an in-flight cycle completes first."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Poll cycle still running after {timeout}s; source not yet stopped")
                return
            self._thread = None
        logger.info("File source stopped")

    def _run(self) -> None:
        if self._stop_event.wait(self.settings.trigger.initial_delay_seconds):
            return

        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                self._record_failure(e)
                logger.exception(f"Unexpected error in poll cycle: {e}")
            self._stop_event.wait(self.watched.poll_interval)

    def stats(self) -> Dict[str, object]:
        return {
            "directory": str(self.poller.root),
            "mode": self.splitter.mode.value,
            "running": self.running,
            "files_emitted": self.files_emitted,
            "messages_sent": self.messages_sent,
            "failures": self.failures,
            "seen": self.poller.seen_count,
            "last_error": self.last_error,
        }
