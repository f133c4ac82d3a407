"""Utility functions for swiftly."""

import hashlib
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

from .exceptions import ConfigError, HashError

# =============================================================================
# Constants
# =============================================================================

# Default number of concurrent upload workers
DEFAULT_WORKERS: int = 4

# Read size used when hashing and streaming files (1 MB)
DEFAULT_CHUNK_SIZE: int = 1024 * 1024

# Content type Swift uses to mark pseudo-directories
DIRECTORY_CONTENT_TYPE: str = "application/directory"

# Default Keystone endpoint
DEFAULT_ENDPOINT: str = "https://auth-east.cloud.ca/v2.0"

# File names generated by the OS that are never uploaded
RESERVED_FILE_NAMES: frozenset[str] = frozenset({".DS_Store"})

# Container headers that publish a container as a public static website
WEBSITE_HEADERS: dict[str, str] = {
    "X-Container-Meta-Web-Index": "index.html",
    "X-Container-Meta-Web-Error": ".html",
    "X-Container-Read": ".r:*,.rlistings",
}


# =============================================================================
# Hash calculation utilities
# =============================================================================


def calculate_md5(
    file_path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE
) -> str:
    """Calculate the MD5 digest of a file's contents.

    The file is read in chunks so large files are never held in memory.
    Swift stores the same digest as the object's ETag.

    Args:
        file_path: Path to the file
        chunk_size: Number of bytes read per iteration

    Returns:
        32 character lowercase hexadecimal digest

    Raises:
        HashError: If the file cannot be opened or fully read

    Examples:
        >>> calculate_md5(Path("empty.txt"))  # doctest: +SKIP
        'd41d8cd98f00b204e9800998ecf8427e'
    """
    digest = hashlib.md5()
    try:
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(chunk_size), b""):
                digest.update(chunk)
    except OSError as e:
        raise HashError(str(file_path), str(e)) from e
    return digest.hexdigest()


# =============================================================================
# Path utilities
# =============================================================================


def to_object_path(path: Path, root: Path) -> str:
    """Convert a local path into an object name relative to ``root``.

    Args:
        path: Absolute local path inside ``root``
        root: Absolute root directory of the sync

    Returns:
        Forward-slash separated name without leading or trailing slashes.
        The root itself maps to an empty string.

    Examples:
        >>> to_object_path(Path("/data/site/css/main.css"), Path("/data/site"))
        'css/main.css'
    """
    relative = path.relative_to(root).as_posix()
    if relative == ".":
        return ""
    return relative.strip("/")


def container_from_domain(domain: str) -> str:
    """Derive the container name from a domain or URL.

    Args:
        domain: Domain name or URL (e.g. "example.com", "https://www.example.com/")

    Returns:
        The host part of the domain

    Raises:
        ConfigError: If no host can be extracted

    Examples:
        >>> container_from_domain("www.example.com")
        'www.example.com'
        >>> container_from_domain("https://example.com/docs")
        'example.com'
    """
    url = domain.strip()
    if not url.startswith("http"):
        url = f"http://{url}"
    host = urlparse(url).hostname
    if not host:
        raise ConfigError(f"Cannot determine a container name from '{domain}'")
    return host
