"""
File source error hierarchy.

All errors are non-fatal to the poll loop. They are logged and the affected
directory or file is retried on a later cycle.
"""

from app.utils.errors import ConnectorError


class DiscoveryError(ConnectorError):
    """Watched directory could not be listed."""

    pass


class SplitError(ConnectorError):
    """A discovered file could not be read or converted into messages."""

    pass
