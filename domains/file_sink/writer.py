"""
File writer for the file sink.

Replacing writes go through a hidden temporary file in the target directory
that is renamed over the target, so readers (including a file source polling
the same directory) never observe a partially written file.
"""

import os
import shutil
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from app.models.schemas import FileExistsMode, Message, SinkTarget
from app.utils.helpers import generate_uuid
from domains.file_sink.errors import WriteError


class FileWriter:
    """Materializes message payloads to resolved sink targets."""

    def __init__(
        self,
        binary: bool = False,
        charset: str = "utf-8",
        mode: FileExistsMode = FileExistsMode.REPLACE,
    ):
        """
        Initialize writer.

        Args:
            binary: Write payloads verbatim instead of as text lines
            charset: Encoding for text payloads
            mode: Behaviour when the target file already exists
        """
        self.binary = binary
        self.charset = charset
        self.mode = FileExistsMode(mode)

    def write(self, target: SinkTarget, message: Message) -> Optional[Path]:
        """
        Write ``message`` to ``target``.

        Returns:
            The written path, or None if the target existed in ``ignore`` mode

        Raises:
            WriteError: On unsupported payloads or filesystem failures
        """
        path = target.path
        data = self.render(message.payload)

        # ValueError: embedded null byte in a resolved name
        try:
            if path.exists():
                if self.mode is FileExistsMode.FAIL:
                    raise WriteError(f"Target file already exists: {path}")
                if self.mode is FileExistsMode.IGNORE:
                    logger.debug(f"Target exists, ignoring message {message.header('id')}: {path}")
                    return None

            target.directory.mkdir(parents=True, exist_ok=True)
            if self.mode is FileExistsMode.APPEND:
                with open(path, "ab") as handle:
                    handle.write(data)
            else:
                self._replace(path, data)
        except (OSError, ValueError) as e:
            raise WriteError(f"Failed to write {path!r}: {e}") from e

        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return path

    def render(self, payload: Any) -> bytes:
        """Return the bytes written for ``payload``."""
        if isinstance(payload, Path):
            try:
                data = payload.read_bytes()
            except OSError as e:
                raise WriteError(f"Cannot read referenced file {payload}: {e}") from e
        elif isinstance(payload, (bytes, bytearray)):
            data = bytes(payload)
        elif isinstance(payload, str):
            text = payload if self.binary else payload + os.linesep
            try:
                return text.encode(self.charset)
            except UnicodeEncodeError as e:
                raise WriteError(f"Cannot encode payload as {self.charset}: {e}") from e
        else:
            raise WriteError(f"Unsupported payload type: {type(payload).__name__}")

        if self.binary:
            return data
        return data + self._separator()

    def _separator(self) -> bytes:
        # Line separator without the byte order mark some charsets prepend
        single = os.linesep.encode(self.charset)
        return (os.linesep * 2).encode(self.charset)[len(single):]

    @staticmethod
    def _replace(path: Path, data: bytes) -> None:
        tmp_path = path.with_name(f".{path.name}.{generate_uuid()}.tmp")
        try:
            tmp_path.write_bytes(data)
            if path.exists():
                shutil.copymode(path, tmp_path)
            tmp_path.replace(path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
