"""Per-entry outcomes and the run report."""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SyncOutcome(str, Enum):
    """Result of processing one entry."""

    UNCHANGED = "unchanged"
    """Remote object already matches"""

    CREATED = "created"
    """Directory marker created"""

    UPLOADED = "uploaded"
    """File uploaded"""

    REMOVED = "removed"
    """Stale object deleted"""

    ERROR = "error"
    """Processing failed"""


@dataclass
class EntryOutcome:
    """Outcome of a single object path."""

    path: str
    outcome: SyncOutcome
    reason: Optional[str] = None


class SyncReport:
    """Collects outcomes from concurrent workers."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self._outcomes: list[EntryOutcome] = []
        self._phase_errors: list[str] = []
        self._lock = threading.Lock()

    def record(
        self, path: str, outcome: SyncOutcome, reason: Optional[str] = None
    ) -> EntryOutcome:
        entry = EntryOutcome(path=path, outcome=outcome, reason=reason)
        with self._lock:
            self._outcomes.append(entry)
        return entry

    def record_phase_error(self, message: str) -> None:
        """Record a failure that is not tied to a single entry."""
        with self._lock:
            self._phase_errors.append(message)

    @property
    def outcomes(self) -> list[EntryOutcome]:
        with self._lock:
            return list(self._outcomes)

    @property
    def phase_errors(self) -> list[str]:
        with self._lock:
            return list(self._phase_errors)

    def count(self, outcome: SyncOutcome) -> int:
        with self._lock:
            return sum(1 for o in self._outcomes if o.outcome == outcome)

    def paths(self, outcome: SyncOutcome) -> list[str]:
        """Return the sorted paths with the given outcome."""
        with self._lock:
            return sorted(o.path for o in self._outcomes if o.outcome == outcome)

    @property
    def error_count(self) -> int:
        return self.count(SyncOutcome.ERROR) + len(self.phase_errors)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def write_count(self) -> int:
        """Number of created, uploaded and removed objects."""
        return (
            self.count(SyncOutcome.CREATED)
            + self.count(SyncOutcome.UPLOADED)
            + self.count(SyncOutcome.REMOVED)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the report to a JSON serializable dictionary."""
        return {
            "dry_run": self.dry_run,
            "unchanged": self.count(SyncOutcome.UNCHANGED),
            "created": self.count(SyncOutcome.CREATED),
            "uploaded": self.count(SyncOutcome.UPLOADED),
            "removed": self.count(SyncOutcome.REMOVED),
            "errors": self.error_count,
            "failures": [
                {"path": o.path, "reason": o.reason}
                for o in self.outcomes
                if o.outcome == SyncOutcome.ERROR
            ]
            + [{"path": None, "reason": msg} for msg in self.phase_errors],
        }
