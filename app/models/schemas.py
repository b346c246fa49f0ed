"""
Pydantic models for the file connectors.

Shared data models across the source and sink pipelines.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.utils.helpers import generate_uuid, now_iso


# =====================================================
# Header Names
# =====================================================

FILENAME = "file_name"
RELATIVE_PATH = "file_relativePath"
ORIGINAL_FILE = "file_originalFile"
MARKER = "file_marker"
CONTENT_TYPE = "contentType"
MESSAGE_ID = "id"
TIMESTAMP = "timestamp"

TEXT_PLAIN = "text/plain"
APPLICATION_JSON = "application/json"


# =====================================================
# Enums
# =====================================================

class ConsumerMode(str, Enum):
    """How a discovered file is turned into messages."""
    REF = "ref"
    CONTENTS = "contents"
    LINES = "lines"


class FileExistsMode(str, Enum):
    """What the sink does when the target file already exists."""
    REPLACE = "replace"
    APPEND = "append"
    FAIL = "fail"
    IGNORE = "ignore"


class Mark(str, Enum):
    """File marker position."""
    START = "START"
    END = "END"


# =====================================================
# Source Models
# =====================================================

class WatchedDirectory(BaseModel):
    """Directory polled by a file source."""
    model_config = ConfigDict(frozen=True)

    path: Path
    filename_pattern: Optional[str] = None
    filename_regex: Optional[str] = None
    recursive: bool = False
    ignore_hidden: bool = True
    poll_interval: float = 1.0  # seconds

    @model_validator(mode="after")
    def check_exclusive_filters(self) -> "WatchedDirectory":
        if self.filename_pattern and self.filename_regex:
            raise ValueError("filename_pattern and filename_regex are mutually exclusive")
        return self


class DiscoveredFile(BaseModel):
    """A file found by the poller that has not been emitted before."""
    model_config = ConfigDict(frozen=True)

    path: Path
    root: Path
    relative_path: str
    size: int
    last_modified: float

    @property
    def name(self) -> str:
        return self.path.name


class FileMarker(BaseModel):
    """Synthetic message payload bracketing the lines of one file."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mark: Mark
    file_path: str = Field(alias="filePath")
    line_count: int = Field(default=0, alias="lineCount")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class FileReference(BaseModel):
    """Serialized form of a ``ref`` mode payload."""
    model_config = ConfigDict(frozen=True)

    path: str


# =====================================================
# Sink Models
# =====================================================

class SinkTarget(BaseModel):
    """Resolved location a sink message is written to."""
    model_config = ConfigDict(frozen=True)

    directory: Path
    filename: str

    @property
    def path(self) -> Path:
        return self.directory / self.filename


# =====================================================
# Messages
# =====================================================

class Message(BaseModel):
    """
    Immutable message passed between connectors.

    The payload is bytes, text, a ``Path`` or a structured model. Headers
    always carry an ``id`` and a ``timestamp``.
    """
    model_config = ConfigDict(frozen=True)

    payload: Any
    headers: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def build(cls, payload: Any, headers: Optional[Dict[str, Any]] = None) -> "Message":
        """Create a message, stamping id and timestamp headers."""
        merged = {MESSAGE_ID: generate_uuid(), TIMESTAMP: now_iso()}
        merged.update(headers or {})
        return cls(payload=payload, headers=merged)

    def with_payload(self, payload: Any, **headers: Any) -> "Message":
        """Return a copy carrying ``payload`` and any extra headers."""
        merged = dict(self.headers)
        merged.update(headers)
        return self.model_copy(update={"payload": payload, "headers": merged})

    def header(self, name: str, default: Any = None) -> Any:
        return self.headers.get(name, default)
