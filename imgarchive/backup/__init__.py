# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Engine - Per-item backup and restore pipelines.
"""

from imgarchive.backup.manager import (
    backup_image,
    inspect_image,
    save_image,
)

from imgarchive.backup.restore import (
    detect_compression,
    load_archive,
    restore_archive,
)

__all__ = [
    # Manager
    "backup_image",
    "inspect_image",
    "save_image",
    # Restore
    "detect_compression",
    "load_archive",
    "restore_archive",
]
