# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive Storage - Sidecar metadata records and the streaming gzip codec.
"""

from imgarchive.storage.sidecar import (
    ArchiveMetadata,
    read_sidecar,
    write_sidecar,
)

from imgarchive.storage.compressor import (
    write_gzip_stream,
    iter_file,
    iter_gunzip,
    get_compression_stats,
)

__all__ = [
    # Sidecar
    "ArchiveMetadata",
    "read_sidecar",
    "write_sidecar",
    # Compressor
    "write_gzip_stream",
    "iter_file",
    "iter_gunzip",
    "get_compression_stats",
]
