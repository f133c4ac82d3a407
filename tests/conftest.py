"""Shared fixtures for swiftly tests."""

import hashlib
import tempfile
import threading
import time
from pathlib import Path
from typing import Optional
from unittest.mock import Mock

import pytest

from swiftly.api import ObjectInfo
from swiftly.exceptions import (
    BackendReadError,
    BackendWriteError,
    ObjectNotFoundError,
)
from swiftly.output import OutputFormatter
from swiftly.utils import DIRECTORY_CONTENT_TYPE


class FakeSwift:
    """In-memory stand-in for SwiftClient.

    Stores objects per name for a single container, records every call and
    tracks how many uploads run at the same time.
    """

    def __init__(self, put_delay: float = 0.0):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple] = []
        self.put_delay = put_delay

        self.fail_listing = False
        self.fail_head: set[str] = set()
        self.fail_put: set[str] = set()
        self.fail_bulk_delete = False
        self.bulk_delete_partial: set[str] = set()

        self.authenticated = False
        self.closed = False
        self.container_headers: dict[str, str] = {}

        self._lock = threading.Lock()
        self._active_puts = 0
        self.max_active_puts = 0

    # Test helpers

    def add_object(
        self, name: str, data: bytes = b"", content_type: str = "text/plain"
    ) -> None:
        self.objects[name] = (data, content_type)

    def add_directory(self, name: str) -> None:
        self.objects[name] = (b"", DIRECTORY_CONTENT_TYPE)

    def calls_named(self, method: str) -> list[tuple]:
        with self._lock:
            return [c for c in self.calls if c[0] == method]

    @property
    def write_calls(self) -> list[tuple]:
        with self._lock:
            return [
                c
                for c in self.calls
                if c[0] in ("put_object", "put_empty_object", "bulk_delete")
            ]

    def _record(self, *call: object) -> None:
        with self._lock:
            self.calls.append(call)

    # SwiftClient interface

    def __enter__(self) -> "FakeSwift":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    def authenticate(self) -> None:
        self.authenticated = True

    def create_container(self, container: str) -> None:
        self._record("create_container", container)

    def update_container(self, container: str, headers: dict[str, str]) -> None:
        self._record("update_container", container)
        self.container_headers.update(headers)

    def list_object_names(self, container: str) -> set[str]:
        self._record("list_object_names", container)
        if self.fail_listing:
            raise BackendReadError("listing unavailable", 503)
        with self._lock:
            return set(self.objects)

    def head_object(self, container: str, name: str) -> ObjectInfo:
        self._record("head_object", name)
        if name in self.fail_head:
            raise BackendReadError("metadata unavailable", 500)
        with self._lock:
            if name not in self.objects:
                raise ObjectNotFoundError()
            data, content_type = self.objects[name]
        return ObjectInfo(
            name=name,
            hash=hashlib.md5(data).hexdigest(),
            content_type=content_type,
            size=len(data),
        )

    def put_object(
        self,
        container: str,
        name: str,
        stream,
        etag: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        with self._lock:
            self._active_puts += 1
            self.max_active_puts = max(self.max_active_puts, self._active_puts)
        try:
            self._record("put_object", name)
            if self.put_delay:
                time.sleep(self.put_delay)
            if name in self.fail_put:
                raise BackendWriteError("upload rejected", 503)
            data = stream.read()
            digest = hashlib.md5(data).hexdigest()
            if etag and etag != digest:
                raise BackendWriteError("Checksum mismatch", 422)
            with self._lock:
                self.objects[name] = (data, content_type or "application/octet-stream")
            return digest
        finally:
            with self._lock:
                self._active_puts -= 1

    def put_empty_object(self, container: str, name: str, content_type: str) -> None:
        self._record("put_empty_object", name)
        if name in self.fail_put:
            raise BackendWriteError("marker rejected", 503)
        with self._lock:
            self.objects[name] = (b"", content_type)

    def bulk_delete(self, container: str, names) -> int:
        names = list(names)
        self._record("bulk_delete", tuple(names))
        if self.fail_bulk_delete:
            raise BackendWriteError("bulk delete unavailable", 503)
        deleted = 0
        with self._lock:
            for name in names:
                if name in self.bulk_delete_partial:
                    continue
                if self.objects.pop(name, None) is not None:
                    deleted += 1
        if self.bulk_delete_partial:
            failed = [n for n in names if n in self.bulk_delete_partial]
            raise BackendWriteError(
                f"Bulk delete failed for {len(failed)} object(s)", failed=failed
            )
        return deleted


@pytest.fixture
def fake_swift():
    """Provide an empty in-memory object store."""
    return FakeSwift()


@pytest.fixture
def slow_swift():
    """Provide a store whose uploads take a little while."""

    def make(put_delay: float = 0.02) -> FakeSwift:
        return FakeSwift(put_delay=put_delay)

    return make


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    output.json_output = False
    return output


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()
