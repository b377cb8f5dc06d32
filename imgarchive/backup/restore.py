# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Restore Manager - Per-archive restore pipeline.

The decode path is chosen in strict priority order:
1. A .tar.gz / .tgz suffix means gzip, whatever the sidecar says
2. Otherwise a readable sidecar's compress_type is used
3. Otherwise the archive is loaded as a plain tar

Restore writes nothing to disk; the only side effect is the engine's image
store.
"""

from datetime import datetime, UTC
from pathlib import Path

import structlog

from imgarchive.config import ArchiveConfig, CompressionKind
from imgarchive.core import ItemOutcome
from imgarchive.engine import ImageEngine
from imgarchive.exceptions import EngineError, ItemError, ItemExternalToolError, ItemMetadataError
from imgarchive.naming import is_compressed_name, sidecar_path
from imgarchive.storage.compressor import iter_gunzip
from imgarchive.storage.sidecar import read_sidecar

logger = structlog.get_logger()


async def detect_compression(archive: Path | str) -> CompressionKind:
    """
    Decide how an archive is encoded.

    Args:
        archive: Path to the archive

    Returns:
        The CompressionKind to decode with
    """
    archive = Path(archive)

    if is_compressed_name(archive.name):
        return CompressionKind.GZIP

    metadata_path = sidecar_path(archive)
    if metadata_path.exists():
        try:
            metadata = await read_sidecar(metadata_path)
            return metadata.compression_kind
        except ItemMetadataError as e:
            logger.warning(
                "sidecar_parse_failed",
                sidecar_path=str(metadata_path),
                error=str(e),
            )

    return CompressionKind.NONE


async def load_archive(
    config: ArchiveConfig,
    engine: ImageEngine,
    archive: Path,
    compression: CompressionKind,
) -> str:
    """
    Feed an archive to the engine's load.

    Returns:
        Combined output of the load

    Raises:
        ItemExternalToolError: If the archive is missing, cannot be decoded,
            or the engine rejects it
    """
    if not archive.is_file():
        raise ItemExternalToolError(
            f"Archive not found: {archive}",
            details={"archive_path": str(archive)},
        )

    try:
        if compression == CompressionKind.GZIP:
            return await engine.load_stream(iter_gunzip(archive, config.chunk_size))
        return await engine.load(archive)
    except EngineError as e:
        raise ItemExternalToolError(
            f"Failed to load image from {archive}: {e.message}",
            details={"archive_path": str(archive), **e.details},
        ) from e


async def restore_archive(
    config: ArchiveConfig,
    engine: ImageEngine,
    archive_path: str,
) -> ItemOutcome:
    """
    Restore one image from an archive.

    Item-level errors are logged and returned as a failed outcome; they are
    never raised to the caller.

    Args:
        config: Archive configuration
        engine: Container engine adapter
        archive_path: Path of the archive to load

    Returns:
        ItemOutcome whose detail is the engine's load output
    """
    start_time = datetime.now(UTC)
    archive = Path(archive_path)

    logger.debug("restore_started", archive_path=archive_path)

    try:
        compression = await detect_compression(archive)
        logger.info(
            "loading_image",
            archive_path=archive_path,
            compression=compression.value,
        )
        output = await load_archive(config, engine, archive, compression)

    except ItemError as e:
        logger.error(
            "restore_failed",
            archive_path=archive_path,
            error_type=type(e).__name__,
            error=str(e),
        )
        return ItemOutcome(
            item=archive_path,
            succeeded=False,
            detail=e.details.get("output", ""),
            error=str(e),
            duration_seconds=(datetime.now(UTC) - start_time).total_seconds(),
        )

    logger.info("restore_completed", archive_path=archive_path, output=output)

    return ItemOutcome(
        item=archive_path,
        succeeded=True,
        detail=output,
        duration_seconds=(datetime.now(UTC) - start_time).total_seconds(),
    )
