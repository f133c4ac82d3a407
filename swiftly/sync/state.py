"""Remote state tracking for a reconciliation run.

The remote listing is fetched once at the start of a run. Every object name
that the local walk discovers is discarded from it, so whatever remains when
the walk is finished is the stale set: objects that exist in the container
but no longer exist locally.
"""

import logging
import threading
from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)


class RemoteListing:
    """Thread-safe working set of remote object names.

    Object names are unique within a container, so a name appears at most
    once. Removals may come from concurrent callers.
    """

    def __init__(self, names: Iterable[str] = ()):
        """Initialize the listing.

        Args:
            names: Object names currently stored in the container
        """
        self._names: set[str] = set(names)
        self._lock = threading.Lock()

    def discard(self, name: str) -> bool:
        """Remove a name that is part of the desired state.

        Args:
            name: Object name

        Returns:
            True if the name was present remotely
        """
        with self._lock:
            if name in self._names:
                self._names.remove(name)
                return True
            return False

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.stale())

    def stale(self) -> list[str]:
        """Return the remaining names in sorted order."""
        with self._lock:
            return sorted(self._names)
