# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration helpers.

create_config_from_env() reads a small set of well-known environment
variables and passes them through to create_config(). Command-line flags are
applied on top with ArchiveConfig.with_updates().
"""

from __future__ import annotations

import os
from pathlib import Path

from imgarchive.builder import create_config
from imgarchive.config import CompressionKind, ArchiveConfig
from imgarchive.errors import (
    explain_invalid_compress_env,
    explain_invalid_timeout_env,
    explain_invalid_workers_env,
)
from imgarchive.exceptions import ConfigurationError


def _parse_workers(value: str | None) -> int | None:
    if not value:
        return None
    try:
        workers = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_workers_env(value)) from exc
    if workers < 1:
        raise ConfigurationError(explain_invalid_workers_env(value))
    return workers


def _parse_compression(value: str | None) -> CompressionKind | None:
    if not value:
        return None
    try:
        return CompressionKind(value.strip().lower())
    except ValueError as exc:
        raise ConfigurationError(explain_invalid_compress_env(value)) from exc


def _parse_timeout(value: str | None) -> float | None:
    if not value:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_timeout_env(value)) from exc
    if seconds <= 0:
        raise ConfigurationError(explain_invalid_timeout_env(value))
    return seconds


def create_config_from_env() -> ArchiveConfig:
    """
    Create an ArchiveConfig from environment variables.

    Optional environment variables:
        - IMGARCHIVE_BACKUP_DIR: Backup directory (default: docker-backups)
        - IMGARCHIVE_WORKERS: Positive integer worker limit (default: 3)
        - IMGARCHIVE_COMPRESS: 'gzip' | 'none' (default: gzip)
        - IMGARCHIVE_DOCKER_BIN: Engine executable (default: docker)
        - IMGARCHIVE_ITEM_TIMEOUT: Per-item timeout in seconds (default: none)
    """

    backup_dir_env = os.getenv("IMGARCHIVE_BACKUP_DIR")

    return create_config(
        backup_dir=Path(backup_dir_env) if backup_dir_env else None,
        max_workers=_parse_workers(os.getenv("IMGARCHIVE_WORKERS")),
        compression=_parse_compression(os.getenv("IMGARCHIVE_COMPRESS")),
        engine_binary=os.getenv("IMGARCHIVE_DOCKER_BIN"),
        item_timeout_seconds=_parse_timeout(os.getenv("IMGARCHIVE_ITEM_TIMEOUT")),
    )
