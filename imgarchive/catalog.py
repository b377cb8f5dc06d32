# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Catalog - Reconcile archives with their sidecars for listing.

Every regular file in the backup directory is either an archive (.tar,
.tar.gz, .tgz), a sidecar (.json), or ignored. Archives are joined with
sidecars on file name; an archive without a usable sidecar is still listed
with its file-system attributes only.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from pathlib import Path
from typing import Dict, List

import structlog

from imgarchive.errors import explain_missing_backup_dir
from imgarchive.exceptions import FatalInputError, ItemMetadataError
from imgarchive.naming import archive_name_for_sidecar, is_archive_name, is_sidecar_name
from imgarchive.storage.sidecar import ArchiveMetadata, read_sidecar

logger = structlog.get_logger()


@dataclass
class CatalogEntry:
    """One archive as shown in a listing."""

    name: str
    path: Path
    size: int
    modified_at: datetime
    metadata: ArchiveMetadata | None = None

    @property
    def is_orphan(self) -> bool:
        """True if no valid sidecar accompanies the archive."""
        return self.metadata is None


async def build_catalog(backup_dir: Path) -> List[CatalogEntry]:
    """
    List the archives in a directory, enriched with sidecar metadata.

    Malformed sidecars are logged and skipped; their archives are still
    listed. Entries are sorted by archive file name.

    Args:
        backup_dir: Directory to scan

    Returns:
        List of CatalogEntry

    Raises:
        FatalInputError: If the directory does not exist
    """
    if not backup_dir.is_dir():
        raise FatalInputError(
            explain_missing_backup_dir(backup_dir),
            details={"backup_dir": str(backup_dir)},
        )

    archives: Dict[str, CatalogEntry] = {}
    metadata: Dict[str, ArchiveMetadata] = {}

    for path in backup_dir.iterdir():
        if not path.is_file():
            continue

        name = path.name

        if is_archive_name(name):
            try:
                stat = path.stat()
            except OSError as e:
                logger.warning("archive_stat_failed", path=str(path), error=str(e))
                continue

            archives[name] = CatalogEntry(
                name=name,
                path=path,
                size=stat.st_size,
                modified_at=datetime.fromtimestamp(stat.st_mtime, UTC),
            )

        elif is_sidecar_name(name):
            try:
                metadata[archive_name_for_sidecar(name)] = await read_sidecar(path)
            except ItemMetadataError as e:
                logger.warning("sidecar_parse_failed", sidecar_path=str(path), error=str(e))

    for name, entry in archives.items():
        entry.metadata = metadata.get(name)

    entries = sorted(archives.values(), key=lambda e: e.name)

    logger.debug(
        "catalog_built",
        backup_dir=str(backup_dir),
        archives=len(entries),
        sidecars=len(metadata),
    )

    return entries


def summarize_catalog(entries: List[CatalogEntry]) -> dict:
    """
    Summarize a catalog listing.

    Returns:
        Dict with archive count, total bytes and orphan count
    """
    return {
        "archive_count": len(entries),
        "total_bytes": sum(e.size for e in entries),
        "orphan_count": sum(1 for e in entries if e.is_orphan),
    }
