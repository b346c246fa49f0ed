"""
File sink error hierarchy.

Errors affect a single message only; other messages keep flowing.
"""

from app.utils.errors import ConnectorError


class ResolutionError(ConnectorError):
    """Target directory or filename could not be computed for a message."""

    pass


class WriteError(ConnectorError):
    """Message payload could not be written to its target file."""

    pass
