# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Backup Manager - Per-image backup pipeline.

Each work item goes through four strictly sequential steps:
1. Inspect the image through the engine
2. Name the archive and sidecar
3. Save the image (raw, or streamed through gzip)
4. Write the metadata sidecar

A failure in any step ends that item only. Files already written are left
in place: a failed save can leave a partial archive, and a failed sidecar
write leaves an archive without metadata.
"""

from datetime import datetime, UTC
from pathlib import Path

import structlog

from imgarchive.config import ArchiveConfig, CompressionKind
from imgarchive.core import ItemOutcome
from imgarchive.engine import ImageDetails, ImageEngine
from imgarchive.exceptions import (
    EngineError,
    ItemError,
    ItemExternalToolError,
    ItemInspectionError,
)
from imgarchive.naming import archive_path, sidecar_path
from imgarchive.storage.compressor import write_gzip_stream
from imgarchive.storage.sidecar import ArchiveMetadata, write_sidecar

logger = structlog.get_logger()


async def inspect_image(engine: ImageEngine, image_name: str) -> ImageDetails:
    """
    Ask the engine for the image's id, tags and size.

    Raises:
        ItemInspectionError: If the engine cannot describe the image
    """
    try:
        return await engine.inspect(image_name)
    except EngineError as e:
        raise ItemInspectionError(
            f"Error inspecting image {image_name}: {e.message}",
            details={"image": image_name, **e.details},
        ) from e


async def save_image(
    config: ArchiveConfig,
    engine: ImageEngine,
    image_name: str,
    destination: Path,
) -> None:
    """
    Save an image to its archive path using the configured compression.

    Raises:
        ItemExternalToolError: If the engine save or the compression fails
    """
    logger.info(
        "saving_image",
        image=image_name,
        archive_path=str(destination),
        compression=config.compression.value,
    )

    try:
        if config.compression == CompressionKind.GZIP:
            await write_gzip_stream(engine.stream_save(image_name), destination)
        else:
            await engine.save(image_name, destination)
    except EngineError as e:
        raise ItemExternalToolError(
            f"Failed to save image {image_name}: {e.message}",
            details={"image": image_name, "archive_path": str(destination), **e.details},
        ) from e


async def backup_image(
    config: ArchiveConfig,
    engine: ImageEngine,
    image_name: str,
    now: datetime | None = None,
) -> ItemOutcome:
    """
    Back up a single image into the configured backup directory.

    Item-level errors are logged and returned as a failed outcome; they are
    never raised to the caller.

    Args:
        config: Archive configuration
        engine: Container engine adapter
        image_name: Image reference to back up
        now: Timestamp used for the archive name (default: current time)

    Returns:
        ItemOutcome whose detail is the archive path (when one was written)
    """
    start_time = datetime.now(UTC)
    archive: Path | None = None

    logger.debug("backup_started", image=image_name)

    try:
        # Step 1: Inspect
        details = await inspect_image(engine, image_name)

        # Step 2: Name
        archive = archive_path(config.backup_dir, image_name, config.compression, now)

        # Step 3: Save (+compress)
        await save_image(config, engine, image_name, archive)

        logger.debug(
            "image_saved",
            image=image_name,
            archive_path=str(archive),
            archive_size=archive.stat().st_size if archive.exists() else None,
        )

        # Step 4: Sidecar
        metadata = ArchiveMetadata(
            image_name=image_name,
            image_id=details.image_id,
            tags=details.tags,
            size_bytes=details.size,
            backup_timestamp=datetime.now(UTC),
            compression_kind=config.compression,
        )
        await write_sidecar(sidecar_path(archive), metadata)

    except ItemError as e:
        logger.error(
            "backup_failed",
            image=image_name,
            archive_path=str(archive) if archive else None,
            error_type=type(e).__name__,
            error=str(e),
        )
        return ItemOutcome(
            item=image_name,
            succeeded=False,
            detail=str(archive) if archive else "",
            error=str(e),
            duration_seconds=(datetime.now(UTC) - start_time).total_seconds(),
        )

    logger.info("backup_completed", image=image_name, archive_path=str(archive))

    return ItemOutcome(
        item=image_name,
        succeeded=True,
        detail=str(archive),
        duration_seconds=(datetime.now(UTC) - start_time).total_seconds(),
    )
