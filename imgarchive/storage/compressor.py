# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Compressor - Streaming gzip encode/decode for archive files.

Archives are never held in memory: the engine's save stream is compressed
chunk by chunk into the destination file, and compressed archives are
decoded chunk by chunk on their way into the engine's load.

Output is standard gzip, interchangeable with `docker save | gzip` and
`gunzip -c | docker load`. Concatenated gzip members are decoded in order.
"""

import asyncio
import zlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import AsyncIterator, Callable, Tuple

import aiofiles
import structlog

from imgarchive.config import DEFAULT_CHUNK_SIZE
from imgarchive.exceptions import ItemExternalToolError

logger = structlog.get_logger()

# Thread pool for CPU-bound (de)compression
_executor = ThreadPoolExecutor(max_workers=4)

DEFAULT_GZIP_LEVEL = 6

# zlib window bits selecting the gzip container format
GZIP_WBITS = 16 + zlib.MAX_WBITS

# Chunks larger than this are (de)compressed off the event loop
_OFFLOAD_THRESHOLD = 256 * 1024


async def _run(func: Callable[[bytes], bytes], data: bytes) -> bytes:
    """Run a codec step, in the thread pool for large chunks."""
    if len(data) > _OFFLOAD_THRESHOLD:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_executor, func, data)
    return func(data)


async def write_gzip_stream(
    chunks: AsyncIterator[bytes],
    destination: Path,
    level: int = DEFAULT_GZIP_LEVEL,
) -> Tuple[int, int]:
    """
    Compress a byte stream into a gzip file.

    Errors raised by the source stream propagate unchanged; the partially
    written destination is left in place.

    Args:
        chunks: Raw archive stream
        destination: Path of the .tar.gz file to create
        level: gzip compression level (1-9)

    Returns:
        Tuple of (raw_bytes, compressed_bytes)

    Raises:
        ItemExternalToolError: If the destination cannot be written
    """
    compressor = zlib.compressobj(level, zlib.DEFLATED, GZIP_WBITS)
    raw_bytes = 0
    compressed_bytes = 0

    try:
        async with aiofiles.open(destination, "wb") as f:
            async for chunk in chunks:
                raw_bytes += len(chunk)
                encoded = await _run(compressor.compress, chunk)
                if encoded:
                    await f.write(encoded)
                    compressed_bytes += len(encoded)

            tail = compressor.flush()
            await f.write(tail)
            compressed_bytes += len(tail)

    except OSError as e:
        raise ItemExternalToolError(
            f"Failed to write compressed archive: {e}",
            details={"destination": str(destination)},
        ) from e

    logger.debug(
        "compression_complete",
        destination=str(destination),
        **get_compression_stats(raw_bytes, compressed_bytes),
    )

    return (raw_bytes, compressed_bytes)


async def iter_file(
    path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield the raw contents of a file in chunks."""
    async with aiofiles.open(path, "rb") as f:
        while True:
            chunk = await f.read(chunk_size)
            if not chunk:
                break
            yield chunk


async def iter_gunzip(
    path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """
    Yield the decompressed contents of a gzip file in chunks.

    Raises:
        ItemExternalToolError: If the file is empty, corrupt or truncated
    """
    decompressor = zlib.decompressobj(GZIP_WBITS)
    member_open = False
    members_done = 0
    received = False

    try:
        async for chunk in iter_file(path, chunk_size):
            received = True
            data = chunk
            while data:
                # Zero padding after a complete member is ignored, as gunzip does
                if not member_open and members_done and not data.strip(b"\x00"):
                    break
                member_open = True
                decoded = await _run(decompressor.decompress, data)
                if decoded:
                    yield decoded

                if decompressor.eof:
                    # Next gzip member (if any) starts in the leftover bytes
                    data = decompressor.unused_data
                    decompressor = zlib.decompressobj(GZIP_WBITS)
                    member_open = False
                    members_done += 1
                else:
                    data = b""

    except zlib.error as e:
        raise ItemExternalToolError(
            f"Failed to decompress archive: {e}",
            details={"archive_path": str(path)},
        ) from e

    if not received:
        raise ItemExternalToolError(
            f"Compressed archive is empty: {path}",
            details={"archive_path": str(path)},
        )

    if member_open:
        raise ItemExternalToolError(
            f"Compressed archive is truncated: {path}",
            details={"archive_path": str(path)},
        )


def get_compression_stats(
    original_size: int,
    compressed_size: int,
) -> dict:
    """
    Calculate compression statistics.

    Args:
        original_size: Original data size in bytes
        compressed_size: Compressed data size in bytes

    Returns:
        Dict with compression statistics
    """
    if compressed_size == 0:
        return {
            "original_size": original_size,
            "compressed_size": compressed_size,
            "compression_ratio": 0,
            "space_saved_percent": 0,
        }

    ratio = original_size / compressed_size
    saved_bytes = original_size - compressed_size
    saved_percent = (saved_bytes / original_size) * 100 if original_size > 0 else 0

    return {
        "original_size": original_size,
        "compressed_size": compressed_size,
        "compression_ratio": round(ratio, 2),
        "space_saved_percent": round(saved_percent, 2),
    }
