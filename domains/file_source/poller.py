"""
Directory poller for the file source.

Lists the watched directory on every poll cycle and returns the files that
pass the name filter and have not been emitted before. Listing is done with
watchdog's ``DirectorySnapshot``, the same snapshot used by its polling
observer.

Producers are expected to write under a hidden temporary name and rename the
file into place; hidden entries are skipped, so a file only becomes visible
once the rename completes.
"""

from pathlib import Path
from typing import List, Optional, Set

from loguru import logger
from watchdog.utils.dirsnapshot import DirectorySnapshot

from app.models.schemas import DiscoveredFile, WatchedDirectory
from app.utils.helpers import has_hidden_component, normalise_path, relative_to_base
from domains.file_source.errors import DiscoveryError
from domains.file_source.filters import FileFilter, build_filter


class DirectoryPoller:
    """
    Poll-based directory watcher with an instance-owned seen-set.

    ``poll`` never records anything; callers ``acknowledge`` a file once it
    has been emitted. Paths that disappear from the directory are pruned from
    the seen-set so a removed and recreated file is picked up again.

    The seen-set is only touched from within a poll cycle, which the file
    source serializes, so no locking happens here.
    """

    def __init__(
        self,
        watched: WatchedDirectory,
        prevent_duplicates: bool = True,
        max_files_per_poll: Optional[int] = None,
    ):
        """
        Initialize directory poller.

        Args:
            watched: Directory, filter and recursion configuration
            prevent_duplicates: Track emitted files so each is returned once
            max_files_per_poll: Cap on files returned per cycle (None: no cap)
        """
        self.watched = watched
        self.root = normalise_path(watched.path)
        self.prevent_duplicates = prevent_duplicates
        self.max_files_per_poll = max_files_per_poll
        self.file_filter: FileFilter = build_filter(
            watched.filename_pattern, watched.filename_regex
        )

        self._seen: Set[Path] = set()

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    def poll(self) -> List[DiscoveredFile]:
        """
        Run one directory listing.

        Returns:
            Newly discovered files in lexical path order

        Raises:
            DiscoveryError: If the watched directory cannot be listed
        """
        try:
            snapshot = DirectorySnapshot(str(self.root), recursive=self.watched.recursive)
        except OSError as e:
            raise DiscoveryError(f"Cannot list {self.root}: {e}") from e

        present: Set[Path] = set()
        discovered: List[DiscoveredFile] = []

        for raw_path in sorted(snapshot.paths):
            path = Path(raw_path)
            if path == self.root or snapshot.isdir(raw_path):
                continue

            present.add(path)

            if self.watched.ignore_hidden and has_hidden_component(path, self.root):
                continue

            if not self.file_filter.accept(path):
                continue

            if self.prevent_duplicates and path in self._seen:
                continue

            discovered.append(
                DiscoveredFile(
                    path=path,
                    root=self.root,
                    relative_path=relative_to_base(path, self.root) or path.name,
                    size=snapshot.size(raw_path),
                    last_modified=snapshot.mtime(raw_path),
                )
            )

        self._prune(present)

        if self.max_files_per_poll is not None:
            discovered = discovered[:self.max_files_per_poll]

        logger.debug(
            f"Polled {self.root}: {len(present)} entries, {len(discovered)} new"
        )
        return discovered

    def acknowledge(self, discovered: DiscoveredFile) -> None:
        """Record ``discovered`` as emitted."""
        if self.prevent_duplicates:
            self._seen.add(discovered.path)

    def reset(self) -> None:
        """Forget every emitted file."""
        self._seen.clear()

    def _prune(self, present: Set[Path]) -> None:
        gone = self._seen - present
        if gone:
            logger.debug(f"Forgetting {len(gone)} removed file(s) under {self.root}")
            self._seen -= gone

