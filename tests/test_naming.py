# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""Tests for archive and sidecar naming."""

from datetime import datetime, UTC
from pathlib import Path

from imgarchive.config import CompressionKind
from imgarchive.naming import (
    archive_file_name,
    archive_name_for_sidecar,
    archive_path,
    is_archive_name,
    is_compressed_name,
    is_sidecar_name,
    sanitize_image_name,
    sidecar_path,
)

FIXED_NOW = datetime(2026, 3, 14, 15, 9, 26, tzinfo=UTC)


def test_sanitize_registry_reference():
    safe = sanitize_image_name("registry.example.com/app:v2")

    assert "/" not in safe
    assert ":" not in safe
    assert safe == "registry.example.com_app_v2"


def test_sanitize_digest_reference():
    safe = sanitize_image_name("alpine@sha256:0123abcd")

    assert safe == "alpine@sha256_0123abcd"


def test_sanitize_long_name_is_bounded_and_distinct():
    first = sanitize_image_name("a" * 300 + ":one")
    second = sanitize_image_name("b" + "a" * 299 + ":one")

    assert len(first) <= 200
    assert first != second


def test_archive_file_name_gzip():
    name = archive_file_name("demo:1.0", CompressionKind.GZIP, FIXED_NOW)

    assert name == "demo_1.0-20260314-150926.tar.gz"


def test_archive_file_name_uncompressed():
    name = archive_file_name("demo:1.0", CompressionKind.NONE, FIXED_NOW)

    assert name == "demo_1.0-20260314-150926.tar"


def test_archive_path_and_sidecar_share_base_name(temp_dir: Path):
    archive = archive_path(temp_dir, "registry.example.com/app:v2", CompressionKind.GZIP, FIXED_NOW)
    sidecar = sidecar_path(archive)

    assert archive.parent == temp_dir
    assert "/" not in archive.name and ":" not in archive.name
    assert sidecar.name == archive.name + ".json"
    assert archive_name_for_sidecar(sidecar.name) == archive.name


def test_same_name_same_second_collides(temp_dir: Path):
    # Documented limitation: the later backup overwrites the earlier one
    first = archive_path(temp_dir, "app/web:1", CompressionKind.GZIP, FIXED_NOW)
    second = archive_path(temp_dir, "app:web/1", CompressionKind.GZIP, FIXED_NOW)

    assert first == second


def test_suffix_classification():
    assert is_archive_name("x.tar")
    assert is_archive_name("x.tar.gz")
    assert is_archive_name("x.tgz")
    assert not is_archive_name("x.tar.gz.json")
    assert not is_archive_name("notes.txt")

    assert is_compressed_name("x.tar.gz")
    assert is_compressed_name("x.tgz")
    assert not is_compressed_name("x.tar")

    assert is_sidecar_name("x.tar.json")
    assert not is_sidecar_name("x.tar")
