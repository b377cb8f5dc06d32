# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
imgarchive Exceptions - Custom exceptions for the imgarchive package.

Fatal errors abort a whole invocation before any worker starts. Item errors
are scoped to a single work item and are caught at the pipeline boundary.
"""


class ImgArchiveError(Exception):
    """Base exception for all imgarchive errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ImgArchiveError):
    """Raised when configuration is invalid."""

    pass


class FatalInputError(ImgArchiveError):
    """Raised when a batch cannot start (no items, unusable directory)."""

    pass


class EngineError(ImgArchiveError):
    """Raised when a container engine subprocess fails."""

    pass


class ItemError(ImgArchiveError):
    """Base exception for failures isolated to one work item."""

    pass


class ItemInspectionError(ItemError):
    """Raised when the engine cannot describe the source image."""

    pass


class ItemExternalToolError(ItemError):
    """Raised when save, compress, load or decompress fails."""

    pass


class ItemMetadataError(ItemError):
    """Raised when a sidecar cannot be written or parsed."""

    pass
