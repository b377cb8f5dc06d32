# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""Tests for work item resolution."""

import io
from pathlib import Path

import pytest

from imgarchive.exceptions import FatalInputError
from imgarchive.inputs import resolve_work_items


def test_positional_arguments():
    assert resolve_work_items("backup", ["a:1", " b:2 ", ""]) == ["a:1", "b:2"]


def test_file_overrides_arguments(temp_dir: Path):
    item_file = temp_dir / "images.txt"
    item_file.write_text("nginx:1.25\n\n  redis:7  \n")

    items = resolve_work_items("backup", ["ignored:1"], file_path=item_file)

    assert items == ["nginx:1.25", "redis:7"]


def test_stdin_overrides_file_and_arguments(temp_dir: Path):
    item_file = temp_dir / "images.txt"
    item_file.write_text("from-file:1\n")

    items = resolve_work_items(
        "restore",
        ["from-args.tar"],
        file_path=item_file,
        use_stdin=True,
        stdin=io.StringIO("a.tar.gz\n\nb.tar\n"),
    )

    assert items == ["a.tar.gz", "b.tar"]


def test_no_items_is_fatal():
    with pytest.raises(FatalInputError) as exc_info:
        resolve_work_items("backup", [])

    assert "No image names provided" in str(exc_info.value)


def test_blank_stdin_is_fatal():
    with pytest.raises(FatalInputError) as exc_info:
        resolve_work_items("restore", use_stdin=True, stdin=io.StringIO("\n  \n"))

    assert "No tarball paths provided" in str(exc_info.value)


def test_unreadable_file_is_fatal(temp_dir: Path):
    with pytest.raises(FatalInputError):
        resolve_work_items("backup", file_path=temp_dir / "missing.txt")
