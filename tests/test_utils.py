"""Unit tests for utility functions."""

from pathlib import Path

import pytest

from swiftly.exceptions import ConfigError, HashError
from swiftly.utils import (
    calculate_md5,
    container_from_domain,
    to_object_path,
)


class TestCalculateMd5:
    """Tests for calculate_md5 function."""

    def test_known_digest(self, temp_dir):
        """Test hash of known content."""
        path = temp_dir / "hello.txt"
        path.write_bytes(b"hello")
        assert calculate_md5(path) == "5d41402abc4b2a76b9719d911017c592"

    def test_empty_file(self, temp_dir):
        """Test hash of an empty file."""
        path = temp_dir / "empty"
        path.write_bytes(b"")
        assert calculate_md5(path) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_chunked_read_matches_single_read(self, temp_dir):
        """Test that small chunks produce the same digest."""
        path = temp_dir / "data.bin"
        path.write_bytes(bytes(range(256)) * 100)
        assert calculate_md5(path, chunk_size=7) == calculate_md5(path)

    def test_accepts_string_path(self, temp_dir):
        """Test that a str path is accepted."""
        path = temp_dir / "hello.txt"
        path.write_bytes(b"hello")
        assert calculate_md5(str(path)) == "5d41402abc4b2a76b9719d911017c592"

    def test_missing_file_raises_hash_error(self, temp_dir):
        """Test that an unreadable file raises HashError."""
        missing = temp_dir / "missing.txt"
        with pytest.raises(HashError, match="Cannot hash") as exc_info:
            calculate_md5(missing)
        assert exc_info.value.path == str(missing)


class TestToObjectPath:
    """Tests for to_object_path function."""

    def test_nested_path(self):
        """Test nested path uses forward slashes."""
        root = Path("/data/site")
        assert to_object_path(root / "css" / "main.css", root) == "css/main.css"

    def test_top_level_file(self):
        """Test file directly below the root."""
        root = Path("/data/site")
        assert to_object_path(root / "index.html", root) == "index.html"

    def test_root_maps_to_empty_string(self):
        """Test that the root itself has no object name."""
        root = Path("/data/site")
        assert to_object_path(root, root) == ""

    def test_dot_prefixed_name_is_kept(self):
        """Test that leading dots in names are preserved."""
        root = Path("/data/site")
        assert to_object_path(root / ".well-known" / "x", root) == ".well-known/x"


class TestContainerFromDomain:
    """Tests for container_from_domain function."""

    def test_bare_domain(self):
        assert container_from_domain("www.example.com") == "www.example.com"

    def test_url_with_scheme_and_path(self):
        assert container_from_domain("https://example.com/docs/") == "example.com"

    def test_domain_with_port(self):
        assert container_from_domain("example.com:8080") == "example.com"

    def test_empty_domain_raises(self):
        """Test that an empty domain cannot be turned into a container."""
        with pytest.raises(ConfigError):
            container_from_domain("")
