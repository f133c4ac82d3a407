"""Comparison logic deciding what to write for each desired entry."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..api import ObjectInfo
from ..utils import DIRECTORY_CONTENT_TYPE


class SyncAction(str, Enum):
    """Actions that can be taken for a desired entry."""

    UPLOAD = "upload"
    """Upload local file to the container"""

    CREATE_DIRECTORY = "create_directory"
    """Create a directory marker"""

    SKIP = "skip"
    """Remote object already matches"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync an entry."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    object_path: str
    """Object name"""

    local_hash: Optional[str] = None
    """MD5 of the local file (files only)"""


def _base_content_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


class FileComparator:
    """Compares desired entries with remote object metadata."""

    def compare_directory(
        self, object_path: str, remote: Optional[ObjectInfo]
    ) -> SyncDecision:
        """Decide whether a directory marker must be created.

        Args:
            object_path: Directory object name
            remote: Remote metadata, or None if the object does not exist

        Returns:
            SyncDecision for the directory
        """
        if remote is None:
            return SyncDecision(
                action=SyncAction.CREATE_DIRECTORY,
                reason="Directory marker missing",
                object_path=object_path,
            )

        if _base_content_type(remote.content_type) != DIRECTORY_CONTENT_TYPE:
            return SyncDecision(
                action=SyncAction.CREATE_DIRECTORY,
                reason=f"Object has content type '{remote.content_type}'",
                object_path=object_path,
            )

        return SyncDecision(
            action=SyncAction.SKIP,
            reason="Directory marker exists",
            object_path=object_path,
        )

    def compare_file(
        self, object_path: str, local_hash: str, remote: Optional[ObjectInfo]
    ) -> SyncDecision:
        """Decide whether a file must be uploaded.

        Args:
            object_path: Object name
            local_hash: MD5 of the local file
            remote: Remote metadata, or None if the object does not exist

        Returns:
            SyncDecision for the file
        """
        if remote is None:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason="New local file",
                object_path=object_path,
                local_hash=local_hash,
            )

        if remote.hash != local_hash:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason="Content changed",
                object_path=object_path,
                local_hash=local_hash,
            )

        return SyncDecision(
            action=SyncAction.SKIP,
            reason="Content unchanged",
            object_path=object_path,
            local_hash=local_hash,
        )
