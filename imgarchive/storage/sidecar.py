# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Sidecar - Metadata records stored next to each archive.

A sidecar is a small JSON document describing one archived image. It is
written once right after a successful save and never modified. Restore uses
it to pick a decode path when the archive suffix is not conclusive; the
catalog uses it to enrich listings.

Wire format (keys are fixed for compatibility with existing backups):

    {
      "image_name": "nginx:1.25",
      "image_id": "sha256:...",
      "tags": ["nginx:1.25"],
      "size": 187654321,
      "backup_date": "2026-01-01T12:00:00+00:00",
      "compress_type": "gzip"
    }
"""

import json
from dataclasses import dataclass
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Dict, Tuple

import aiofiles
import structlog

from imgarchive.config import CompressionKind
from imgarchive.exceptions import ItemMetadataError

logger = structlog.get_logger()


@dataclass(frozen=True)
class ArchiveMetadata:
    """Metadata describing one archived image."""

    image_name: str  # Work item as given by the operator
    image_id: str  # Engine-assigned content identifier
    tags: Tuple[str, ...]
    size_bytes: int
    backup_timestamp: datetime | None  # None when the record carries no date
    compression_kind: CompressionKind

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the sidecar wire keys."""
        return {
            "image_name": self.image_name,
            "image_id": self.image_id,
            "tags": list(self.tags),
            "size": self.size_bytes,
            "backup_date": self.backup_timestamp.isoformat() if self.backup_timestamp else None,
            "compress_type": self.compression_kind.value,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ArchiveMetadata":
        """
        Parse a decoded sidecar document.

        Absent keys take empty values (blank strings, no tags, size 0, no
        timestamp). Any compress_type other than "gzip" reads as none.

        Raises:
            ItemMetadataError: If the document is not an object or a present
                field has the wrong type
        """
        if not isinstance(data, dict):
            raise ItemMetadataError("Sidecar is not a JSON object")

        try:
            tags = data.get("tags") or []
            if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
                raise ValueError("tags must be a list of strings")

            size = data.get("size", 0)
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                raise ValueError(f"size must be a non-negative integer, got {size!r}")

            backup_date = data.get("backup_date")

            return cls(
                image_name=_optional_str(data, "image_name"),
                image_id=_optional_str(data, "image_id"),
                tags=tuple(tags),
                size_bytes=size,
                backup_timestamp=_parse_timestamp(backup_date) if backup_date else None,
                compression_kind=_parse_compression(data.get("compress_type")),
            )
        except (TypeError, ValueError) as e:
            raise ItemMetadataError(
                f"Invalid sidecar record: {e}",
                details={"keys": sorted(data.keys())},
            ) from e


def _optional_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def _parse_compression(value: Any) -> CompressionKind:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"compress_type must be a string, got {value!r}")
    return CompressionKind.GZIP if value == CompressionKind.GZIP.value else CompressionKind.NONE


def _parse_timestamp(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp, trimming sub-microsecond digits."""
    if not isinstance(value, str):
        raise ValueError(f"backup_date must be a string, got {value!r}")

    text = value.replace("Z", "+00:00")
    # Nanosecond precision is cut to microseconds
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


async def write_sidecar(path: Path, metadata: ArchiveMetadata) -> Path:
    """
    Write a sidecar file.

    The write is not atomic with respect to the archive: if it fails, the
    archive stays in place without metadata.

    Raises:
        ItemMetadataError: If the file cannot be written
    """
    try:
        payload = json.dumps(metadata.to_dict(), indent=2) + "\n"
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(payload)

        logger.debug("sidecar_written", sidecar_path=str(path))
        return path

    except OSError as e:
        raise ItemMetadataError(
            f"Failed to write metadata: {e}",
            details={"sidecar_path": str(path)},
        ) from e


async def read_sidecar(path: Path) -> ArchiveMetadata:
    """
    Read and parse a sidecar file.

    Raises:
        ItemMetadataError: If the file is missing, unreadable or malformed
    """
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
    except FileNotFoundError as e:
        raise ItemMetadataError(
            f"Sidecar not found: {path}",
            details={"sidecar_path": str(path)},
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ItemMetadataError(
            f"Failed to read sidecar: {e}",
            details={"sidecar_path": str(path)},
        ) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ItemMetadataError(
            f"Malformed sidecar JSON: {e}",
            details={"sidecar_path": str(path)},
        ) from e

    return ArchiveMetadata.from_dict(data)
