"""
File Sink Domain

Writes incoming messages to files:
- expressions.py - Pluggable expression evaluation for directory/name expressions
- resolver.py - Target path resolution from static settings or expressions
- writer.py - Text/binary materialization with atomic replace
- sink.py - Per-message resolve-and-write handler
"""

__all__ = ["errors", "expressions", "resolver", "sink", "writer"]
