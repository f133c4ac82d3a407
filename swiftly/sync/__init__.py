"""Sync engine for swiftly - one-way reconciliation of a directory into a container."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .operations import SyncOperations
from .outcomes import EntryOutcome, SyncOutcome, SyncReport
from .scanner import DesiredEntry, DesiredState, DirectoryScanner, EntryKind
from .state import RemoteListing
from .workers import WorkerPool

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "DirectoryScanner",
    "DesiredEntry",
    "DesiredState",
    "EntryKind",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "RemoteListing",
    "SyncOutcome",
    "EntryOutcome",
    "SyncReport",
    "WorkerPool",
]
