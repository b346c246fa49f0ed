"""
Error hierarchy for the file connectors.

Every error is local to one file, message or cycle. None of them put the
connectors into a global failure state.
"""


class ConnectorError(Exception):
    """Base exception for connector failures."""

    pass


class ChannelFullError(ConnectorError):
    """A message could not be handed to a channel within the send timeout."""

    pass
