"""Exceptions raised by swiftly."""

from typing import Optional


class SwiftlyError(Exception):
    """Base exception for all swiftly errors."""


class ConfigError(SwiftlyError):
    """Raised when required settings are missing or invalid."""


class AuthError(SwiftlyError):
    """Raised when authentication with the object store fails."""


class DiscoveryError(SwiftlyError):
    """Raised when the local directory tree cannot be walked."""


class ContainerError(SwiftlyError):
    """Raised when the target container cannot be created or configured."""


class BackendError(SwiftlyError):
    """Base exception for object store request failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BackendReadError(BackendError):
    """Raised when listing or fetching metadata from the object store fails."""


class ObjectNotFoundError(BackendReadError):
    """Raised when the requested object or container does not exist."""

    def __init__(self, message: str = "Object not found"):
        super().__init__(message, status_code=404)


class BackendWriteError(BackendError):
    """Raised when an upload, container update or delete fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        failed: Optional[list[str]] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.failed = failed or []


class HashError(SwiftlyError):
    """Raised when a local file cannot be read to compute its hash."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot hash '{path}': {reason}")
        self.path = path
