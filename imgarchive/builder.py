# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Builder - Functional builder pattern for configuration.

Each builder function takes a config dict and returns a new dict with the
modification applied (immutable updates). build_config() turns the dict into
a validated ArchiveConfig.
"""

from pathlib import Path
from typing import Any, Callable, Dict

from imgarchive.config import (
    DEFAULT_BACKUP_DIR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_WORKERS,
    ArchiveConfig,
    CompressionKind,
)


# Type alias for builder functions
ConfigDict = Dict[str, Any]
BuilderFunc = Callable[[ConfigDict], ConfigDict]


def create_empty_config() -> ConfigDict:
    """
    Create an initial configuration dictionary.

    Returns:
        Dict with default values for all configuration fields
    """
    return {
        "backup_dir": DEFAULT_BACKUP_DIR,
        "max_workers": DEFAULT_MAX_WORKERS,
        "verbose": False,
        "compression": CompressionKind.GZIP,
        "engine_binary": "docker",
        "item_timeout_seconds": None,
        "chunk_size": DEFAULT_CHUNK_SIZE,
    }


def with_backup_dir(config: ConfigDict, backup_dir: Path | str) -> ConfigDict:
    """
    Set the directory archives are written to and listed from.

    Args:
        config: Current configuration dictionary
        backup_dir: Backup directory path

    Returns:
        New configuration dictionary with backup_dir set
    """
    return {**config, "backup_dir": Path(backup_dir)}


def with_workers(config: ConfigDict, max_workers: int) -> ConfigDict:
    """
    Set the maximum number of concurrently processed items.

    Args:
        config: Current configuration dictionary
        max_workers: Worker limit (must be >= 1)

    Returns:
        New configuration dictionary with max_workers set
    """
    return {**config, "max_workers": max_workers}


def with_compression(
    config: ConfigDict, compression: CompressionKind | str
) -> ConfigDict:
    """
    Set the encoding used for new archives.

    Args:
        config: Current configuration dictionary
        compression: 'gzip' or 'none'

    Returns:
        New configuration dictionary with compression set
    """
    if isinstance(compression, str):
        compression = CompressionKind(compression.lower())
    return {**config, "compression": compression}


def with_engine_binary(config: ConfigDict, binary: str) -> ConfigDict:
    """Use a different container engine executable (e.g. podman)."""
    return {**config, "engine_binary": binary}


def with_item_timeout(config: ConfigDict, seconds: float | None) -> ConfigDict:
    """
    Bound how long a single item may run.

    A timed-out item is reported as failed; the rest of the batch continues.
    """
    return {**config, "item_timeout_seconds": seconds}


def verbose_output(config: ConfigDict) -> ConfigDict:
    """Enable debug-level progress output."""
    return {**config, "verbose": True}


def build_config(config_dict: ConfigDict) -> ArchiveConfig:
    """
    Validate and build an immutable ArchiveConfig from a configuration dictionary.

    Args:
        config_dict: Configuration dictionary built using builder functions

    Returns:
        Validated, immutable ArchiveConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    return ArchiveConfig(**config_dict)


def pipe(*funcs: BuilderFunc) -> BuilderFunc:
    """
    Compose multiple builder functions into a single function.

        config = pipe(
            lambda c: with_backup_dir(c, "/srv/images"),
            lambda c: with_workers(c, 8),
            verbose_output,
        )(create_empty_config())
    """

    def composed(config: ConfigDict) -> ConfigDict:
        result = config
        for func in funcs:
            result = func(result)
        return result

    return composed


def create_config(
    *,
    backup_dir: Path | str | None = None,
    max_workers: int | None = None,
    compression: CompressionKind | str | None = None,
    verbose: bool = False,
    engine_binary: str | None = None,
    item_timeout_seconds: float | None = None,
    **kwargs: Any,
) -> ArchiveConfig:
    """
    Create an ArchiveConfig with a simple keyword API.

    Unset arguments keep their defaults.

    Example:
        config = create_config(backup_dir="/srv/images", max_workers=8)

        # Uncompressed archives through podman
        config = create_config(compression="none", engine_binary="podman")

    Raises:
        ConfigurationError: If validation fails
        ValueError: If compression is not a known kind
    """
    config_dict = create_empty_config()

    if backup_dir is not None:
        config_dict = with_backup_dir(config_dict, backup_dir)

    if max_workers is not None:
        config_dict = with_workers(config_dict, max_workers)

    if compression is not None:
        config_dict = with_compression(config_dict, compression)

    if verbose:
        config_dict = verbose_output(config_dict)

    if engine_binary:
        config_dict = with_engine_binary(config_dict, engine_binary)

    if item_timeout_seconds is not None:
        config_dict = with_item_timeout(config_dict, item_timeout_seconds)

    # Apply any additional kwargs
    for key, value in kwargs.items():
        if key in config_dict:
            config_dict[key] = value

    return build_config(config_dict)
