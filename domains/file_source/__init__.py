"""
File Source Domain

Watches a directory and emits discovered files as messages:
- poller.py - Fixed-delay directory listing with name filters and a seen-set
- splitter.py - Payload building per consumer mode (ref, contents, lines)
- conversion.py - Content-type negotiation at the outbound port
- source.py - Trigger thread wiring poller, splitter and channel together
"""

__all__ = ["conversion", "errors", "filters", "poller", "source", "splitter"]
