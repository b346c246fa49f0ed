"""
Helper utilities for the file connectors.

Common functions used across domains.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from uuid import uuid4


def generate_uuid() -> str:
    """Generate a unique identifier."""
    return str(uuid4())


def now_iso() -> str:
    """Get current timestamp as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""

    try:
        return path.expanduser().resolve()
    except FileNotFoundError:
        return path.expanduser().absolute()


def relative_to_base(path: Path, base: Optional[Path]) -> Optional[str]:
    """Return ``path`` relative to ``base`` when possible."""

    if base is None:
        return None

    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return None


def is_hidden(path: Path) -> bool:
    """Check if path is hidden (starts with dot)."""
    return path.name.startswith('.')


def has_hidden_component(path: Path, base: Path) -> bool:
    """Check if any component of ``path`` below ``base`` is hidden."""
    relative = relative_to_base(path, base)
    if relative is None:
        return is_hidden(path)
    return any(part.startswith('.') for part in Path(relative).parts)


def normalise_suffix(suffix: Optional[str]) -> str:
    """Return ``suffix`` with a leading dot, or an empty string."""
    if not suffix:
        return ""
    return suffix if suffix.startswith('.') else f".{suffix}"
