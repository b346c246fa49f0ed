"""Content-type negotiation at the file source's outbound port."""

from pathlib import Path

from pydantic import BaseModel

from app.models.schemas import (
    APPLICATION_JSON,
    CONTENT_TYPE,
    TEXT_PLAIN,
    FileReference,
    Message,
)


def is_json(content_type: str) -> bool:
    """Check if ``content_type`` names a JSON media type."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == APPLICATION_JSON or media_type.endswith("+json")


def convert(message: Message, content_type: str = APPLICATION_JSON) -> Message:
    """
    Convert a message payload for the declared outbound content type.

    Args:
        message: Message built by the splitter
        content_type: Content type declared for the outbound port

    Returns:
        Message with a wire-ready payload and a ``contentType`` header

    ``Path`` payloads become the raw path string for ``text/plain`` and a
    JSON file reference otherwise. Structured payloads are rendered as JSON.
    Bytes and text pass through unchanged.
    """
    payload = message.payload
    text_plain = content_type.split(";", 1)[0].strip().lower() == TEXT_PLAIN

    if isinstance(payload, Path):
        if text_plain:
            return message.with_payload(str(payload), **{CONTENT_TYPE: content_type})
        reference = FileReference(path=str(payload))
        return message.with_payload(
            reference.model_dump_json(),
            **{CONTENT_TYPE: content_type if is_json(content_type) else APPLICATION_JSON},
        )

    if isinstance(payload, BaseModel):
        if is_json(content_type):
            rendered = payload.model_dump_json(by_alias=True)
        else:
            rendered = str(payload)
        return message.with_payload(rendered, **{CONTENT_TYPE: content_type})

    return message.with_payload(payload, **{CONTENT_TYPE: content_type})
