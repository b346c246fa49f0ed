"""
Payload builder for the file source.

Turns one discovered file into the messages the source emits, according to
the consumer mode:

- ``ref``: a single message whose payload is the absolute file path
- ``contents``: a single message carrying the file bytes (or decoded text)
- ``lines``: one message per line, optionally bracketed by START/END markers

The full message list is built before anything is emitted, so a read failure
halfway through a file never produces a partial sequence.
"""

import re
from typing import Any, Dict, List

from loguru import logger

from app.models.schemas import (
    FILENAME,
    MARKER,
    ORIGINAL_FILE,
    RELATIVE_PATH,
    ConsumerMode,
    DiscoveredFile,
    FileMarker,
    Mark,
    Message,
)
from domains.file_source.errors import SplitError

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class FileSplitter:
    """Builds outbound messages for discovered files."""

    def __init__(
        self,
        mode: ConsumerMode = ConsumerMode.CONTENTS,
        with_markers: bool = False,
        markers_json: bool = True,
        binary: bool = True,
        charset: str = "utf-8",
    ):
        """
        Initialize splitter.

        Args:
            mode: Consumer mode
            with_markers: Emit START/END markers around lines (lines mode only)
            markers_json: Emit markers as JSON strings instead of FileMarker objects
            binary: In contents mode, emit bytes instead of decoded text
            charset: Encoding used whenever file contents are read as text
        """
        self.mode = ConsumerMode(mode)
        self.with_markers = with_markers
        self.markers_json = markers_json
        self.binary = binary
        self.charset = charset

    def build(self, discovered: DiscoveredFile) -> List[Message]:
        """
        Build the messages for ``discovered``.

        Raises:
            SplitError: If the file cannot be read or decoded
        """
        headers = self.file_headers(discovered)

        try:
            if self.mode is ConsumerMode.REF:
                return [Message.build(discovered.path, headers)]

            if self.mode is ConsumerMode.CONTENTS:
                return [Message.build(self._read_contents(discovered), headers)]

            return self._split_lines(discovered, headers)

        except (OSError, UnicodeDecodeError) as e:
            raise SplitError(f"Failed to read {discovered.path}: {e}") from e

    @staticmethod
    def file_headers(discovered: DiscoveredFile) -> Dict[str, Any]:
        """Headers attached to every message built from ``discovered``."""
        return {
            FILENAME: discovered.name,
            RELATIVE_PATH: discovered.relative_path,
            ORIGINAL_FILE: discovered.path,
        }

    def _read_contents(self, discovered: DiscoveredFile):
        data = discovered.path.read_bytes()
        if self.binary:
            return data
        return data.decode(self.charset)

    def _split_lines(self, discovered: DiscoveredFile, headers: Dict[str, Any]) -> List[Message]:
        with open(discovered.path, "r", encoding=self.charset, newline="") as handle:
            lines = _LINE_BREAK.split(handle.read())

        # a trailing terminator does not start another line
        if lines and lines[-1] == "":
            lines.pop()

        messages = [Message.build(line, headers) for line in lines]

        if self.with_markers:
            file_path = str(discovered.path)
            start = FileMarker(mark=Mark.START, file_path=file_path)
            end = FileMarker(mark=Mark.END, file_path=file_path, line_count=len(lines))
            messages.insert(0, self._marker_message(start, headers))
            messages.append(self._marker_message(end, headers))

        logger.debug(f"Split {discovered.path} into {len(lines)} line(s)")
        return messages

    def _marker_message(self, marker: FileMarker, headers: Dict[str, Any]) -> Message:
        payload = marker.to_json() if self.markers_json else marker
        return Message.build(payload, {**headers, MARKER: marker.mark.value})
