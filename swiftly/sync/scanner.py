"""Directory scanning utilities for sync operations."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from ..exceptions import DiscoveryError
from ..utils import RESERVED_FILE_NAMES, to_object_path
from .state import RemoteListing

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Kind of a desired remote object."""

    DIRECTORY = "directory"
    """Zero-byte directory marker"""

    FILE = "file"
    """Object uploaded from a local file"""


@dataclass
class DesiredEntry:
    """One object that should exist in the container."""

    object_path: str
    """Object name relative to the container root (forward slashes)"""

    kind: EntryKind
    """Directory marker or file"""

    local_path: Optional[Path] = None
    """Absolute local path (files only)"""

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


@dataclass
class DesiredState:
    """Result of a local walk."""

    directories: list[DesiredEntry] = field(default_factory=list)
    """Directory markers, parents before children"""

    files: list[DesiredEntry] = field(default_factory=list)
    """File entries"""

    def __len__(self) -> int:
        return len(self.directories) + len(self.files)


class DirectoryScanner:
    """Walks a local directory and builds the desired remote state.

    Each discovered object name is removed from the remote listing passed to
    :meth:`scan_local`, which leaves the stale objects behind.

    Examples:
        >>> scanner = DirectoryScanner(exclude=[Path("/site/drafts")])
        >>> listing = RemoteListing({"index.html", "old.html"})
        >>> state = scanner.scan_local(Path("/site"), listing)
        >>> listing.stale()  # objects without a local counterpart
        ['old.html']
    """

    def __init__(self, exclude: Optional[list[Path]] = None):
        """Initialize directory scanner.

        Args:
            exclude: Absolute paths to skip. A local path is skipped when it
                starts with any of them.
        """
        self.exclude = [str(p) for p in (exclude or [])]

    def should_exclude(self, path: Path) -> bool:
        """Check if a path matches an exclusion rule.

        Args:
            path: Absolute local path

        Returns:
            True if the path should be skipped
        """
        path_str = str(path)
        return any(path_str.startswith(prefix) for prefix in self.exclude)

    def scan_local(
        self, root: Path, listing: Optional[RemoteListing] = None
    ) -> DesiredState:
        """Recursively scan a local directory.

        Args:
            root: Absolute directory to scan (not itself emitted)
            listing: Remote listing to reduce to the stale set

        Returns:
            DesiredState with directory and file entries

        Raises:
            DiscoveryError: If the root or any subdirectory cannot be read
        """
        if listing is None:
            listing = RemoteListing()

        if not root.is_dir():
            raise DiscoveryError(f"Not a directory: {root}")

        state = DesiredState()
        self._scan_directory(root, root, listing, state)
        logger.debug(
            "Scanned %s: %d directories, %d files, %d stale remote object(s)",
            root,
            len(state.directories),
            len(state.files),
            len(listing),
        )
        return state

    def _scan_directory(
        self,
        directory: Path,
        root: Path,
        listing: RemoteListing,
        state: DesiredState,
    ) -> None:
        try:
            items = sorted(directory.iterdir())
        except OSError as e:
            raise DiscoveryError(f"Problem discovering '{directory}': {e}") from e

        for item in items:
            if self.should_exclude(item):
                logger.debug("Excluding: %s", item)
                continue

            # Symlinks, sockets and devices are not synced
            if item.is_symlink():
                continue

            object_path = to_object_path(item, root)

            if item.is_dir():
                state.directories.append(
                    DesiredEntry(object_path=object_path, kind=EntryKind.DIRECTORY)
                )
                listing.discard(object_path)
                self._scan_directory(item, root, listing, state)
            elif item.is_file():
                if item.name in RESERVED_FILE_NAMES:
                    continue
                state.files.append(
                    DesiredEntry(
                        object_path=object_path,
                        kind=EntryKind.FILE,
                        local_path=item,
                    )
                )
                listing.discard(object_path)
