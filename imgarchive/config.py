# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Configuration - Immutable configuration data structures.

The configuration is frozen after creation and passed explicitly into the
orchestrator and both pipelines, so no worker ever observes a settings
change mid-batch.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List


class CompressionKind(str, Enum):
    """Encoding used for an archive file."""

    NONE = "none"  # Raw engine save output
    GZIP = "gzip"  # Save output streamed through gzip


DEFAULT_BACKUP_DIR = Path("docker-backups")
DEFAULT_MAX_WORKERS = 3
DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1MB


@dataclass(frozen=True)
class ArchiveConfig:
    """
    Immutable configuration for backup, restore and listing.

    Values are validated in __post_init__; every problem found is reported
    in a single ConfigurationError.
    """

    # Directory archives and sidecars are written to (and listed from)
    backup_dir: Path = field(default_factory=lambda: DEFAULT_BACKUP_DIR)

    # Maximum number of items processed concurrently
    max_workers: int = DEFAULT_MAX_WORKERS

    # Emit debug-level progress
    verbose: bool = False

    # Encoding for new archives
    compression: CompressionKind = CompressionKind.GZIP

    # Container engine executable
    engine_binary: str = "docker"

    # Per-item timeout in seconds (None disables it)
    item_timeout_seconds: float | None = None

    # Read/write chunk size for streamed archives
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if not str(self.backup_dir).strip():
            errors.append("backup_dir must not be empty")

        if self.max_workers < 1:
            errors.append(f"max_workers must be >= 1, got {self.max_workers}")

        if not isinstance(self.compression, CompressionKind):
            errors.append(f"Invalid compression: {self.compression!r}")

        if not self.engine_binary:
            errors.append("engine_binary must not be empty")

        if self.item_timeout_seconds is not None and self.item_timeout_seconds <= 0:
            errors.append(
                f"item_timeout_seconds must be > 0, got {self.item_timeout_seconds}"
            )

        if self.chunk_size < 1:
            errors.append(f"chunk_size must be >= 1, got {self.chunk_size}")

        if errors:
            from imgarchive.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    def with_updates(self, **kwargs) -> "ArchiveConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return ArchiveConfig(**current)
