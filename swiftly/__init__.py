"""Swiftly - mirror a local directory into OpenStack Swift object storage."""

from .api import ObjectInfo, SwiftClient
from .exceptions import (
    AuthError,
    BackendError,
    BackendReadError,
    BackendWriteError,
    ConfigError,
    DiscoveryError,
    HashError,
    ObjectNotFoundError,
    SwiftlyError,
)
from .utils import calculate_md5

__all__ = [
    "SwiftClient",
    "ObjectInfo",
    "SwiftlyError",
    "AuthError",
    "BackendError",
    "BackendReadError",
    "BackendWriteError",
    "ConfigError",
    "DiscoveryError",
    "HashError",
    "ObjectNotFoundError",
    "calculate_md5",
]
