# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for imgarchive.

These helpers centralize wording for fatal input and configuration errors so
the CLI and library present consistent, actionable messages.
"""

from pathlib import Path


def explain_no_work_items(kind: str) -> str:
    """
    Explain that no image names or archive paths were provided.
    """

    noun = "image names" if kind == "backup" else "tarball paths"
    return f"No {noun} provided. Use command arguments, --file, or --stdin."


def explain_unreadable_item_file(path: Path | str, error: Exception) -> str:
    """
    Explain that the --file input could not be read.
    """

    return f"Error reading item file {str(path)!r}: {error}"


def explain_backup_dir_unavailable(path: Path | str, error: Exception) -> str:
    """
    Explain that the backup directory cannot be created.
    """

    return (
        f"Failed to create backup directory {str(path)!r}: {error}. "
        "Check the path and its permissions, or pass --dir."
    )


def explain_missing_backup_dir(path: Path | str) -> str:
    """
    Explain that the directory to list does not exist.
    """

    return f"Backup directory {str(path)!r} does not exist."


def explain_invalid_workers_env(value: str | None) -> str:
    """
    Explain that IMGARCHIVE_WORKERS is invalid.
    """

    return (
        f"Invalid IMGARCHIVE_WORKERS value: {value!r}. "
        "It must be a positive integer."
    )


def explain_invalid_compress_env(value: str | None) -> str:
    """
    Explain that IMGARCHIVE_COMPRESS is invalid.
    """

    return (
        f"Invalid IMGARCHIVE_COMPRESS value: {value!r}. "
        "Expected 'gzip' or 'none'."
    )


def explain_invalid_timeout_env(value: str | None) -> str:
    """
    Explain that IMGARCHIVE_ITEM_TIMEOUT is invalid.
    """

    return (
        f"Invalid IMGARCHIVE_ITEM_TIMEOUT value: {value!r}. "
        "It must be a positive number of seconds."
    )
