"""Configuration management for swiftly.

Credentials and defaults are resolved from environment variables and an
optional ``KEY=VALUE`` file at ``~/.config/swiftly/config``. The settings of
a single sync run are collected in :class:`SyncSettings`, which is built once
by the CLI and handed to the engine.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .exceptions import ConfigError
from .utils import DEFAULT_ENDPOINT, DEFAULT_WORKERS

logger = logging.getLogger(__name__)

ENV_IDENTITY = "SWIFTLY_IDENTITY"
ENV_PASSWORD = "SWIFTLY_PASSWORD"
ENV_ENDPOINT = "SWIFTLY_ENDPOINT"
ENV_REGION = "SWIFTLY_REGION"
ENV_WORKERS = "SWIFTLY_WORKERS"

_CONFIG_KEYS = (ENV_IDENTITY, ENV_PASSWORD, ENV_ENDPOINT, ENV_REGION, ENV_WORKERS)


class Config:
    """Reads and writes persistent swiftly settings."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file. Defaults to
                ~/.config/swiftly
        """
        if config_dir is None:
            config_dir = Path.home() / ".config" / "swiftly"
        self.config_dir = config_dir
        self._file_values = self._load_file()

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_dir / "config"

    def _load_file(self) -> dict[str, str]:
        path = self.get_config_path()
        if not path.exists():
            return {}

        values: dict[str, str] = {}
        try:
            with open(path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, value = line.split("=", 1)
                    values[key.strip()] = value.strip()
        except OSError as e:
            logger.warning(f"Failed to read config file {path}: {e}")
        return values

    def _get(self, key: str) -> Optional[str]:
        # Environment overrides the config file
        return os.environ.get(key) or self._file_values.get(key)

    @property
    def identity(self) -> Optional[str]:
        return self._get(ENV_IDENTITY)

    @property
    def password(self) -> Optional[str]:
        return self._get(ENV_PASSWORD)

    @property
    def endpoint(self) -> str:
        return self._get(ENV_ENDPOINT) or DEFAULT_ENDPOINT

    @property
    def region(self) -> Optional[str]:
        return self._get(ENV_REGION)

    @property
    def workers(self) -> int:
        value = self._get(ENV_WORKERS)
        if value is None:
            return DEFAULT_WORKERS
        try:
            return int(value)
        except ValueError as e:
            raise ConfigError(f"{ENV_WORKERS} must be an integer, got '{value}'") from e

    def is_configured(self) -> bool:
        """Check whether credentials are available."""
        return bool(self.identity and self.password)

    def save(self, **values: Optional[str]) -> Path:
        """Persist settings to the config file.

        Args:
            **values: Settings keyed by environment variable name
                (e.g. SWIFTLY_IDENTITY="tenant:user"). None values are skipped.

        Returns:
            Path of the written file
        """
        for key in values:
            if key not in _CONFIG_KEYS:
                raise ConfigError(f"Unknown config key: {key}")

        merged = dict(self._file_values)
        merged.update({k: v for k, v in values.items() if v is not None})

        self.config_dir.mkdir(parents=True, exist_ok=True)
        path = self.get_config_path()
        with open(path, "w", encoding="utf-8") as f:
            f.write("# swiftly configuration\n")
            for key in _CONFIG_KEYS:
                if key in merged:
                    f.write(f"{key}={merged[key]}\n")
        path.chmod(0o600)

        self._file_values = merged
        return path


def parse_identity(identity: str) -> tuple[str, str]:
    """Split an identity of the form ``<tenant>:<username>``.

    Args:
        identity: Identity string

    Returns:
        Tuple of (tenant, username)

    Raises:
        ConfigError: If the identity is not formatted correctly

    Examples:
        >>> parse_identity("acme:deploy")
        ('acme', 'deploy')
    """
    tenant, sep, username = identity.partition(":")
    if not sep or not tenant or not username:
        raise ConfigError(
            "The identity needs to be formatted as '<tenant>:<username>'"
        )
    return tenant, username


def parse_exclude_list(exclude: Optional[str]) -> list[Path]:
    """Turn a comma separated exclude option into absolute paths.

    Args:
        exclude: Comma separated list of files or directories

    Returns:
        List of absolute paths (empty items are dropped)
    """
    if not exclude:
        return []
    return [
        Path(os.path.abspath(item.strip())) for item in exclude.split(",") if item.strip()
    ]


@dataclass
class SyncSettings:
    """Settings for a single reconciliation run."""

    local: Path
    """Root directory that is mirrored"""

    container: str
    """Target container name"""

    exclude: list[Path] = field(default_factory=list)
    """Absolute paths that are never uploaded (prefix match)"""

    workers: int = DEFAULT_WORKERS
    """Number of concurrent upload workers"""

    directory_workers: Optional[int] = None
    """Cap on concurrent directory marker checks (None = one per directory)"""

    dry_run: bool = False
    """Report what would change without writing to the container"""

    website: bool = True
    """Publish the container as a public static website"""

    def __post_init__(self) -> None:
        """Normalize and validate settings."""
        local: Union[str, Path] = self.local
        self.local = Path(os.path.abspath(local))
        self.exclude = [Path(os.path.abspath(p)) for p in self.exclude]

        if not self.container:
            raise ConfigError("A target container is required")
        if self.workers < 1:
            raise ConfigError("Workers must be at least 1")
        if self.directory_workers is not None and self.directory_workers < 1:
            raise ConfigError("Directory workers must be at least 1")
