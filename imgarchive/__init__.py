# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive - Archive and restore container images as portable files.

Backs up many images concurrently into tarballs (optionally gzip compressed)
with a JSON metadata sidecar next to each one, restores them into the
container engine, and lists what a backup directory holds.
"""

__version__ = "0.1.0"

# Configuration creation (user-facing API)
from imgarchive.builder import create_config
from imgarchive.config import ArchiveConfig, CompressionKind
from imgarchive.env import create_config_from_env

# Core orchestration
from imgarchive.core import (
    BatchResult,
    ItemOutcome,
    run_batch,
    run_backup_batch,
    run_restore_batch,
)

# Catalog
from imgarchive.catalog import CatalogEntry, build_catalog

__all__ = [
    # Version
    "__version__",
    # Configuration
    "create_config",
    "create_config_from_env",
    "ArchiveConfig",
    "CompressionKind",
    # Core orchestration functions
    "BatchResult",
    "ItemOutcome",
    "run_batch",
    "run_backup_batch",
    "run_restore_batch",
    # Catalog
    "CatalogEntry",
    "build_catalog",
]
