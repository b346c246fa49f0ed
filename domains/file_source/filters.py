"""Name filters applied to directory entries before they reach the splitter."""

import fnmatch
import re
from pathlib import Path
from typing import Optional


class FileFilter:
    """Accepts every file."""

    def accept(self, path: Path) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GlobFilter(FileFilter):
    """Matches the base name against a shell-style pattern such as ``*.txt``."""

    def __init__(self, pattern: str):
        self.pattern = pattern

    def accept(self, path: Path) -> bool:
        return fnmatch.fnmatchcase(path.name, self.pattern)

    def __repr__(self) -> str:
        return f"GlobFilter({self.pattern!r})"


class RegexFilter(FileFilter):
    """Matches the whole base name against a regular expression."""

    def __init__(self, regex: str):
        self.regex = re.compile(regex)

    def accept(self, path: Path) -> bool:
        return self.regex.fullmatch(path.name) is not None

    def __repr__(self) -> str:
        return f"RegexFilter({self.regex.pattern!r})"


def build_filter(pattern: Optional[str] = None, regex: Optional[str] = None) -> FileFilter:
    """
    Build the name filter for a watched directory.

    Args:
        pattern: Glob pattern, or None
        regex: Regular expression, or None

    Returns:
        The single configured filter (accept-all when neither is set)

    Raises:
        ValueError: If both a pattern and a regex are given
    """
    if pattern and regex:
        raise ValueError("filename pattern and regex are mutually exclusive")
    if pattern:
        return GlobFilter(pattern)
    if regex:
        return RegexFilter(regex)
    return FileFilter()
