"""Storage operations used by the sync engine."""

import logging
from typing import Optional

from ..api import ObjectInfo, SwiftClient
from ..exceptions import (
    AuthError,
    BackendReadError,
    ContainerError,
    ObjectNotFoundError,
    SwiftlyError,
)
from ..utils import DIRECTORY_CONTENT_TYPE, WEBSITE_HEADERS
from .scanner import DesiredEntry

logger = logging.getLogger(__name__)


class SyncOperations:
    """Container-scoped wrapper around the storage client."""

    def __init__(self, client: SwiftClient, container: str):
        """Initialize sync operations.

        Args:
            client: Authenticated Swift client
            container: Target container name
        """
        self.client = client
        self.container = container

    def prepare_container(self, website: bool = True) -> None:
        """Create the container and optionally publish it as a website.

        Args:
            website: Set the static website index, error page and public
                read ACL

        Raises:
            ContainerError: If the container cannot be created or updated
        """
        try:
            self.client.create_container(self.container)
        except SwiftlyError as e:
            raise ContainerError(
                f"Problem (creating | validating) the container: {e}"
            ) from e

        if not website:
            return
        try:
            self.client.update_container(self.container, WEBSITE_HEADERS)
        except SwiftlyError as e:
            raise ContainerError(f"Problem updating headers for container: {e}") from e

    def list_remote(self) -> set[str]:
        """Return all object names in the container.

        A container that does not exist yet has no objects.

        Raises:
            BackendReadError: If the listing cannot be retrieved
        """
        try:
            return self.client.list_object_names(self.container)
        except ObjectNotFoundError:
            logger.debug("Container %s does not exist yet", self.container)
            return set()

    def get_remote_info(self, object_path: str) -> Optional[ObjectInfo]:
        """Fetch remote metadata, treating any failed fetch as absent.

        Args:
            object_path: Object name

        Returns:
            ObjectInfo, or None if the object is missing or unreadable
        """
        try:
            return self.client.head_object(self.container, object_path)
        except ObjectNotFoundError:
            return None
        except (BackendReadError, AuthError) as e:
            logger.debug("Metadata fetch for %s failed, assuming absent: %s", object_path, e)
            return None

    def create_directory(self, object_path: str) -> None:
        """Create a directory marker.

        Raises:
            BackendWriteError: If the marker cannot be created
        """
        self.client.put_empty_object(self.container, object_path, DIRECTORY_CONTENT_TYPE)

    def upload_file(self, entry: DesiredEntry, local_hash: str) -> None:
        """Stream a local file into the container.

        Args:
            entry: File entry to upload
            local_hash: Precomputed MD5, verified by the server

        Raises:
            OSError: If the local file cannot be opened
            BackendWriteError: If the upload fails
        """
        if entry.local_path is None:
            raise ValueError(f"Entry has no local file: {entry.object_path}")

        with open(entry.local_path, "rb") as f:
            self.client.put_object(
                self.container,
                entry.object_path,
                f,
                etag=local_hash,
            )

    def delete_remote(self, object_paths: list[str]) -> int:
        """Delete objects in one bulk request.

        Raises:
            BackendWriteError: If the bulk delete fails
        """
        return self.client.bulk_delete(self.container, object_paths)
