# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Naming - Deterministic archive and sidecar file names.

An archive is named {sanitized_image}-{YYYYMMDD-HHMMSS}.tar[.gz] and its
sidecar is the archive name plus ".json", so the two are associated purely
by string prefix.

Two images that sanitize to the same name and finish within the same second
get the same archive name; the later write replaces the earlier one.
"""

import hashlib
from datetime import datetime, UTC
from pathlib import Path

from imgarchive.config import CompressionKind

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

TAR_SUFFIX = ".tar"
GZIP_SUFFIX = ".gz"
SIDECAR_SUFFIX = ".json"

# Ordered longest first so ".tar.gz" wins over ".tar"
ARCHIVE_SUFFIXES = (".tar.gz", ".tgz", ".tar")
COMPRESSED_SUFFIXES = (".tar.gz", ".tgz")

# Characters that cannot appear in a single file-system leaf name
_UNSAFE_CHARS = ("/", "\\", ":", "*", "?", '"', "<", ">", "|")

_MAX_NAME_LENGTH = 200


def sanitize_image_name(image_name: str) -> str:
    """
    Convert an image reference to a safe file name component.

    Replaces path separators and other path-hostile characters with
    underscores. Over-long names keep their tail and gain a short hash of the
    full reference.
    """
    safe = image_name
    for char in _UNSAFE_CHARS:
        safe = safe.replace(char, "_")

    if len(safe) > _MAX_NAME_LENGTH:
        name_hash = hashlib.sha256(image_name.encode()).hexdigest()[:8]
        safe = safe[-(_MAX_NAME_LENGTH - 10):] + "_" + name_hash

    return safe


def archive_file_name(
    image_name: str,
    compression: CompressionKind,
    now: datetime | None = None,
) -> str:
    """
    Build the archive file name for an image.

    Args:
        image_name: Image reference as given by the operator
        compression: Encoding of the archive
        now: Timestamp to embed (default: current UTC time)

    Returns:
        File name such as "library_nginx_1.25-20260101-120000.tar.gz"
    """
    moment = now or datetime.now(UTC)
    name = f"{sanitize_image_name(image_name)}-{moment.strftime(TIMESTAMP_FORMAT)}"
    name += TAR_SUFFIX
    if compression == CompressionKind.GZIP:
        name += GZIP_SUFFIX
    return name


def archive_path(
    backup_dir: Path,
    image_name: str,
    compression: CompressionKind,
    now: datetime | None = None,
) -> Path:
    """Full destination path of the archive for an image."""
    return Path(backup_dir) / archive_file_name(image_name, compression, now)


def sidecar_path(archive: Path | str) -> Path:
    """Path of the metadata sidecar belonging to an archive."""
    return Path(f"{archive}{SIDECAR_SUFFIX}")


def is_archive_name(name: str) -> bool:
    """True if the file name carries a recognized archive suffix."""
    return name.endswith(ARCHIVE_SUFFIXES)


def is_compressed_name(name: str) -> bool:
    """True if the file name carries a gzip archive suffix."""
    return name.endswith(COMPRESSED_SUFFIXES)


def is_sidecar_name(name: str) -> bool:
    """True if the file name looks like a metadata sidecar."""
    return name.endswith(SIDECAR_SUFFIX)


def archive_name_for_sidecar(sidecar_name: str) -> str:
    """Archive file name a sidecar belongs to ("x.tar.gz.json" -> "x.tar.gz")."""
    if sidecar_name.endswith(SIDECAR_SUFFIX):
        return sidecar_name[: -len(SIDECAR_SUFFIX)]
    return sidecar_name
