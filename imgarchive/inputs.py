# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Work item resolution for the backup and restore commands.

Sources are mutually exclusive and checked in order: stdin, then a file,
then positional arguments. Lines are trimmed and blank lines dropped.
"""

import sys
from pathlib import Path
from typing import Iterable, List, Sequence, TextIO

from imgarchive.errors import explain_no_work_items, explain_unreadable_item_file
from imgarchive.exceptions import FatalInputError


def _clean_lines(lines: Iterable[str]) -> List[str]:
    return [line.strip() for line in lines if line.strip()]


def resolve_work_items(
    kind: str,
    arguments: Sequence[str] = (),
    file_path: Path | None = None,
    use_stdin: bool = False,
    stdin: TextIO | None = None,
) -> List[str]:
    """
    Resolve the list of work items for a batch.

    Args:
        kind: "backup" or "restore" (used in error messages)
        arguments: Positional command arguments
        file_path: File with one item per line
        use_stdin: Read one item per line from stdin
        stdin: Stream to read when use_stdin is set (default: sys.stdin)

    Returns:
        Non-empty list of work items

    Raises:
        FatalInputError: If the source cannot be read or yields no items
    """
    if use_stdin:
        items = _clean_lines(stdin or sys.stdin)
    elif file_path is not None:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                items = _clean_lines(f)
        except (OSError, UnicodeDecodeError) as e:
            raise FatalInputError(
                explain_unreadable_item_file(file_path, e),
                details={"file": str(file_path)},
            ) from e
    else:
        items = _clean_lines(arguments)

    if not items:
        raise FatalInputError(explain_no_work_items(kind))

    return items
